"""
Shared test fixtures.

Settlements and cargo are built in code so tests don't depend on data files.
Dice rolls are scripted so every result is exact.
"""

import common
import oldworld
import pytest


def scriptedRoller(*values):
    """Dice roller that returns the given values in order and fails if it runs out."""
    return common.DiceRoller(randomGenerator=common.ScriptedRandomGenerator(values=values))


@pytest.fixture
def altdorf():
    return oldworld.Settlement(
        region='Reikland',
        name='Altdorf',
        size='CS',
        wealth=4,
        population=105000,
        productionTags=['Trade', 'Government'],
        flags=[oldworld.SettlementFlag.Trade, oldworld.SettlementFlag.Government],
        ruler='Emperor Karl-Franz I',
        garrison='35a/80b/1000c',
        notes='Imperial Capital')


@pytest.fixture
def farmingVillage():
    return oldworld.Settlement(
        region='Reikland',
        name='Ubersreik Farms',
        size=4,
        wealth=4,
        population=1200,
        productionTags=['Agriculture'],
        flags=[oldworld.SettlementFlag.Agriculture])


@pytest.fixture
def catalog():
    return oldworld.CargoCatalog(cargoTypes=[
        oldworld.CargoType(
            name='Grain',
            category='Agriculture',
            basePrices={
                oldworld.Season.Spring: 2,
                oldworld.Season.Summer: 3,
                oldworld.Season.Autumn: 1,
                oldworld.Season.Winter: 4}),
        oldworld.CargoType(
            name='Wine/Brandy',
            category='Luxury',
            basePrices={
                oldworld.Season.Spring: 15,
                oldworld.Season.Summer: 12,
                oldworld.Season.Autumn: 18,
                oldworld.Season.Winter: 20},
            qualityTiers={'poor': 0.5, 'average': 1.0, 'good': 1.5, 'excellent': 2.0}),
        oldworld.CargoType(
            name='Metal',
            category='Raw Materials',
            basePrices={
                oldworld.Season.Spring: 8,
                oldworld.Season.Summer: 8,
                oldworld.Season.Autumn: 9,
                oldworld.Season.Winter: 10},
            encumbrancePerUnit=2)])
