"""
Tests for settlements, seasons, currency, cargo types and the seasonal
cargo tables.
"""

import oldworld
import pytest


class TestSettlement:
    def test_size_codes(self, altdorf):
        assert altdorf.size() == 4
        assert oldworld.parseSettlementSize('T') == 3
        assert oldworld.parseSettlementSize('v') == 1
        assert oldworld.parseSettlementSize('5') == 5

    def test_invalid_size(self):
        with pytest.raises(oldworld.InvalidArgumentException):
            oldworld.parseSettlementSize('X')
        with pytest.raises(oldworld.InvalidArgumentException):
            oldworld.parseSettlementSize(6)

    def test_invalid_wealth(self):
        with pytest.raises(oldworld.InvalidArgumentException):
            oldworld.Settlement(name='Nowhere', size=1, wealth=0)

    def test_trade_centre(self, altdorf, farmingVillage):
        assert altdorf.isTradeCenter()
        assert altdorf.specificGoodsTags() == ['Government']
        assert not farmingVillage.isTradeCenter()
        assert farmingVillage.specificGoodsTags() == ['Agriculture']

    def test_production_matching_is_case_insensitive(self, farmingVillage):
        assert farmingVillage.produces('agriculture')
        assert not farmingVillage.produces('Metal')

    def test_duplicate_production_tags_keep_order(self):
        settlement = oldworld.Settlement(
            name='Dup',
            size=2,
            wealth=2,
            productionTags=['Wine', 'Grain', 'Wine'])
        assert settlement.productionTags() == ('Wine', 'Grain')

    def test_from_data(self):
        settlement = oldworld.Settlement.fromData({
            'region': 'Reikland',
            'name': 'Grissenwald',
            'size': 'ST',
            'wealth': '3',
            'population': '1,200',
            'source': ['Mine', 'Metal'],
            'flags': ['mine', 'unknown-flag'],
            'garrison': ['10a/20b', '30c']})
        assert settlement.size() == 2
        assert settlement.wealth() == 3
        assert settlement.population() == 1200
        assert settlement.flags() == frozenset([oldworld.SettlementFlag.Mine])
        assert settlement.garrison() == {'a': 10, 'b': 20, 'c': 30}
        assert str(settlement) == 'Grissenwald (Reikland)'

    def test_garrison_string_is_parsed(self, altdorf):
        assert altdorf.garrison() == {'a': 35, 'b': 80, 'c': 1000}
        settlement = oldworld.Settlement(
            name='Fort',
            size='F',
            wealth=2,
            garrison={'c': 40})
        assert settlement.garrison() == {'c': 40}

    def test_from_data_missing_fields(self):
        with pytest.raises(oldworld.ConfigurationMissingException):
            oldworld.Settlement.fromData({'name': 'Broken'})

    def test_flags_are_sorted_by_value(self):
        flags = oldworld.sortedFlags([
            oldworld.SettlementFlag.Trade,
            oldworld.SettlementFlag.Agriculture,
            oldworld.SettlementFlag.Mine])
        assert flags == [
            oldworld.SettlementFlag.Agriculture,
            oldworld.SettlementFlag.Mine,
            oldworld.SettlementFlag.Trade]


class TestGarrison:
    def test_single_string(self):
        assert oldworld.parseGarrison('35a/80b/1000c') == {'a': 35, 'b': 80, 'c': 1000}

    def test_mapping_and_empty(self):
        assert oldworld.parseGarrison({'a': '5'}) == {'a': 5}
        assert oldworld.parseGarrison(None) == {}

    def test_invalid_entry(self):
        with pytest.raises(oldworld.InvalidArgumentException):
            oldworld.parseGarrison('lots of troops')


class TestSeason:
    def test_from_string(self):
        assert oldworld.Season.fromString(' Winter ') == oldworld.Season.Winter
        assert oldworld.Season.fromString('fall') == oldworld.Season.Autumn

    def test_invalid_season(self):
        with pytest.raises(oldworld.InvalidArgumentException):
            oldworld.Season.fromString('monsoon')
        with pytest.raises(oldworld.InvalidArgumentException):
            oldworld.validateSeason(None)
        with pytest.raises(oldworld.InvalidArgumentException):
            oldworld.validateSeason(3)


class TestCurrency:
    def test_crowns_to_pennies(self):
        assert oldworld.crownsToPennies(1.5) == 360
        assert oldworld.crownsToPennies(0.001, rounding=oldworld.RoundingMode.Up) == 1
        assert oldworld.crownsToPennies(0.004, rounding=oldworld.RoundingMode.Down) == 0
        assert oldworld.penniesToCrowns(480) == 2

    def test_format(self):
        assert oldworld.formatCurrency(263) == '1GC 1s 11d'
        assert oldworld.formatCurrency(240) == '1GC'
        assert oldworld.formatCurrency(0) == '0d'
        assert oldworld.formatCurrency(-12) == '-1s'

    def test_parse(self):
        assert oldworld.parseCurrency('2GC 4s 6d') == 534
        assert oldworld.parseCurrency('3 crowns') == 720

    def test_parse_invalid(self):
        with pytest.raises(oldworld.InvalidArgumentException):
            oldworld.parseCurrency('some money')
        with pytest.raises(oldworld.InvalidArgumentException):
            oldworld.toPennies({'florins': 2})


class TestCargoType:
    def test_missing_season_price(self):
        with pytest.raises(oldworld.InvalidArgumentException):
            oldworld.CargoType(
                name='Broken',
                category='Agriculture',
                basePrices={oldworld.Season.Spring: 1})

    def test_average_price(self, catalog):
        assert catalog.get('Grain').averagePrice() == 2.5

    def test_quality_tiers(self, catalog):
        wine = catalog.get('wine/brandy')
        assert wine.hasQualityTiers()
        assert wine.qualityMultiplier('Good').value() == 1.5
        assert wine.qualityMultiplier().value() == 1.0

    def test_ungraded_cargo_is_average_only(self, catalog):
        grain = catalog.get('Grain')
        assert grain.qualityMultiplier('average').value() == 1.0
        with pytest.raises(oldworld.NotFoundException):
            grain.qualityMultiplier('good')

    def test_from_data(self):
        cargoType = oldworld.CargoType.fromData({
            'name': 'Fish',
            'category': 'Food',
            'basePrices': {'spring': 2, 'summer': 2, 'autumn': 3, 'fall': 3, 'winter': 4}})
        assert cargoType.seasonalPrice(oldworld.Season.Autumn).value() == 3
        assert cargoType.encumbrancePerUnit() == 1


class TestCargoCatalog:
    def test_lookup(self, catalog):
        assert len(catalog) == 3
        assert catalog.contains('METAL')
        assert not catalog.contains('Timber')
        with pytest.raises(oldworld.NotFoundException):
            catalog.get('Timber')

    def test_duplicates_rejected(self, catalog):
        with pytest.raises(oldworld.InvalidArgumentException):
            oldworld.CargoCatalog(cargoTypes=catalog.listAll() + [catalog.get('Grain')])

    def test_default_catalog_covers_seasonal_table(self):
        catalog = oldworld.CargoCatalog.default()
        for name in oldworld.SeasonalCargoTable.default().cargoNames():
            assert catalog.contains(name)


class TestSeasonalCargoTable:
    def test_default_table_partitions_every_season(self):
        table = oldworld.SeasonalCargoTable.default()
        for season in oldworld.Season:
            entries = table.entries(season)
            assert entries[0].low() == 1
            assert entries[-1].high() == 100
            assert sum(entry.span() for entry in entries) == 100

    def test_lookup(self):
        table = oldworld.SeasonalCargoTable.default()
        assert table.lookup(oldworld.Season.Spring, 1) == 'Grain'
        assert table.lookup(oldworld.Season.Spring, 20) == 'Grain'
        assert table.lookup(oldworld.Season.Spring, 21) == 'Metal'
        assert table.lookup(oldworld.Season.Spring, 100) == 'Luxuries'

    def test_lookup_out_of_range(self):
        table = oldworld.SeasonalCargoTable.default()
        with pytest.raises(oldworld.InvalidArgumentException):
            table.lookup(oldworld.Season.Spring, 0)
        with pytest.raises(oldworld.InvalidArgumentException):
            table.lookup(oldworld.Season.Spring, 101)

    def test_probability(self):
        table = oldworld.SeasonalCargoTable.default()
        assert table.probability(oldworld.Season.Spring, 'Grain') == pytest.approx(0.2)
        assert table.probability(oldworld.Season.Spring, 'Unknown') == 0

    @pytest.mark.parametrize('entries', [
        [(1, 50, 'Grain'), (52, 100, 'Metal')],
        [(1, 50, 'Grain'), (50, 100, 'Metal')],
        [(1, 50, 'Grain'), (51, 99, 'Metal')],
        [(1, 50, 'Grain'), (100, 51, 'Metal')]])
    def test_invalid_partitions(self, entries):
        tableEntries = {season: [(1, 100, 'Grain')] for season in oldworld.Season}
        tableEntries[oldworld.Season.Summer] = entries
        with pytest.raises(oldworld.InvalidArgumentException):
            oldworld.SeasonalCargoTable(entries=tableEntries)

    def test_missing_season(self):
        with pytest.raises(oldworld.InvalidArgumentException):
            oldworld.SeasonalCargoTable(entries={oldworld.Season.Spring: [(1, 100, 'Grain')]})
