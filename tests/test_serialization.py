"""
Tests for writing price breakdowns, merchants and purchase results as JSON.
"""

import common
import json
import logic
import oldworld
import pytest

from conftest import scriptedRoller


@pytest.fixture
def purchase(altdorf, catalog):
    return logic.attemptPurchase(
        settlement=altdorf,
        season=oldworld.Season.Spring,
        catalog=catalog,
        diceRoller=scriptedRoller(50, 1, 35, 75, 50, 0.5, 20, 90),
        quantity=100,
        playerSkill=50)


class TestEnumSerialisation:
    def test_round_trip(self):
        data = logic.serialiseEnum(enumValue=logic.PriceModifierType.Haggle)
        assert data == {'enum': 'Haggle'}
        assert logic.deserialiseEnum(type=logic.PriceModifierType, data=data) == logic.PriceModifierType.Haggle

    def test_invalid(self):
        with pytest.raises(RuntimeError):
            logic.deserialiseEnum(type=logic.PriceModifierType, data={})
        with pytest.raises(RuntimeError):
            logic.deserialiseEnum(type=logic.PriceModifierType, data={'enum': 'Bribe'})


class TestPriceBreakdownSerialisation:
    def test_serialise(self, purchase):
        data = logic.serialisePriceBreakdown(breakdown=purchase.priceBreakdown())
        assert data['version'] == '1.0'
        assert data['cargoName'] == 'Grain'
        assert data['season'] == 'spring'
        assert [modifier['type'] for modifier in data['modifiers']] == \
            [{'enum': 'PartialPurchase'}, {'enum': 'Haggle'}]
        assert data['totalPrice'] == pytest.approx(19.8)
        assert data['totalPriceString'] == '19GC 16s'
        assert 'valueFunc' in data['finalPricePerUnit']

    def test_without_calculations(self, purchase):
        data = logic.serialisePriceBreakdown(
            breakdown=purchase.priceBreakdown(),
            includeVersion=False,
            includeCalculations=False)
        assert 'version' not in data
        assert 'valueFunc' not in data['finalPricePerUnit']

    def test_deserialise(self, purchase):
        original = purchase.priceBreakdown()
        breakdown = logic.deserialisePriceBreakdown(
            jsonData=json.loads(json.dumps(logic.serialisePriceBreakdown(breakdown=original))))
        assert breakdown.cargoName() == original.cargoName()
        assert breakdown.season() == original.season()
        assert breakdown.quantity() == 100
        assert breakdown.finalPricePerUnit() == pytest.approx(original.finalPricePerUnit())
        assert [modifier.type() for modifier in breakdown.modifiers()] == \
            [modifier.type() for modifier in original.modifiers()]

    @pytest.mark.parametrize('change', [
        {'version': '2.0'},
        {'season': 'monsoon'},
        {'modifiers': 'none'},
        {'cargoName': None}])
    def test_deserialise_invalid(self, purchase, change):
        data = dict(logic.serialisePriceBreakdown(breakdown=purchase.priceBreakdown()))
        data.update(change)
        with pytest.raises(RuntimeError):
            logic.deserialisePriceBreakdown(jsonData=data)


class TestPurchaseResultSerialisation:
    def test_serialise(self, purchase):
        data = logic.serialisePurchaseResult(result=purchase)
        assert data['settlement'] == 'Altdorf'
        assert data['availability']['state'] == 'available'
        assert data['availability']['chance'] == 80
        assert data['cargoSelection']['method'] == 'trade_center_with_goods'
        assert data['cargoSize']['totalSize'] == 640
        assert data['cargoSize']['tradeBonus'] is True
        assert data['haggle']['success'] is True
        assert data['haggle']['merchant']['skill'] == 57
        assert [roll['value'] for roll in data['rolls']] == [50, 1, 35, 75, 50, 0.5, 20, 90]

    def test_unavailable(self, altdorf, catalog):
        result = logic.attemptPurchase(
            settlement=altdorf,
            season=oldworld.Season.Spring,
            catalog=catalog,
            diceRoller=scriptedRoller(90))
        data = logic.serialisePurchaseResult(result=result)
        assert data['availability']['state'] == 'unavailable'
        assert 'priceBreakdown' not in data
        assert 'cargoSize' not in data

    def test_write(self, purchase, tmp_path):
        path = tmp_path / 'purchase.json'
        logic.writePurchaseResult(result=purchase, path=str(path))
        with open(path, 'r', encoding='UTF8') as file:
            data = json.load(file)
        assert data['priceBreakdown']['cargoName'] == 'Grain'


class TestMerchantSerialisation:
    def test_write_merchants(self, altdorf, catalog, tmp_path):
        merchants = logic.generateMerchants(
            settlement=altdorf,
            season=oldworld.Season.Spring,
            catalog=catalog,
            diceRoller=common.DiceRoller(randomGenerator=common.RandomGenerator(seed=3)))
        path = tmp_path / 'merchants.json'
        logic.writeMerchants(merchants=merchants, path=str(path))
        with open(path, 'r', encoding='UTF8') as file:
            data = json.load(file)
        assert len(data['merchants']) == len(merchants)
        first = data['merchants'][0]
        assert first['id'] == merchants[0].id()
        assert first['role'] == 'producer'
        assert first['skillModel'] == {'enum': 'Percentile'}
        assert first['equilibrium']['supply'] + first['equilibrium']['demand'] == 200
