"""
Tests for selling cargo: eligibility, finding a buyer, offers, haggling and
the special sales.
"""

import logic
import oldworld
import pytest

from conftest import scriptedRoller


@pytest.fixture
def hamlet():
    return oldworld.Settlement(
        name='Hamlet',
        size=1,
        wealth=2,
        productionTags=['Grain'],
        flags=[oldworld.SettlementFlag.Subsistence])


@pytest.fixture
def marktdorf():
    # Wants grain it doesn't grow so buyers are keen
    return oldworld.Settlement(
        name='Marktdorf',
        size=3,
        wealth=3,
        demandTags=['Grain'])


def _sell(settlement, catalog, diceRoller, cargoName='Grain', quantity=100, season=oldworld.Season.Spring, **kwargs):
    return logic.attemptSale(
        settlement=settlement,
        season=season,
        catalog=catalog,
        diceRoller=diceRoller,
        cargoName=cargoName,
        quantity=quantity,
        **kwargs)


class TestEligibility:
    def test_no_purchase_location(self, altdorf):
        assert logic.checkSellingEligibility(settlement=altdorf).canSell()

    def test_different_settlement(self, altdorf):
        eligibility = logic.checkSellingEligibility(
            settlement=altdorf,
            purchaseSettlementName='Nuln',
            daysSincePurchase=0)
        assert eligibility.canSell()
        assert eligibility.daysRemaining() == 0

    @pytest.mark.parametrize('days,canSell,daysRemaining', [
        (None, False, 7),
        (0, False, 7),
        (3, False, 4),
        (6, False, 1),
        (7, True, 0),
        (30, True, 0)])
    def test_same_settlement(self, altdorf, days, canSell, daysRemaining):
        eligibility = logic.checkSellingEligibility(
            settlement=altdorf,
            purchaseSettlementName='altdorf',
            daysSincePurchase=days)
        assert eligibility.canSell() == canSell
        assert eligibility.daysRemaining() == daysRemaining

    def test_negative_days(self, altdorf):
        with pytest.raises(oldworld.InvalidArgumentException):
            logic.checkSellingEligibility(
                settlement=altdorf,
                purchaseSettlementName='Altdorf',
                daysSincePurchase=-1)


class TestBuyer:
    def test_chance(self, altdorf, farmingVillage, hamlet):
        assert logic.calculateBuyerChance(settlement=altdorf).value() == 70
        assert logic.calculateBuyerChance(settlement=farmingVillage).value() == 40
        assert logic.calculateBuyerChance(settlement=hamlet).value() == 10
        port = oldworld.Settlement(name='Port', size=5, wealth=5, productionTags=['Trade'])
        assert logic.calculateBuyerChance(settlement=port).value() == 80

    @pytest.mark.parametrize('roll,found', [
        (1, True),
        (70, True),
        (71, False),
        (100, False)])
    def test_find_buyer(self, altdorf, roll, found):
        check = logic.findBuyer(settlement=altdorf, diceRoller=scriptedRoller(roll))
        assert check.available() == found
        assert check.roll().value() == roll

    def test_village_demand(self, hamlet):
        demand = logic.rollVillageDemand(
            settlement=hamlet,
            cargoName='Metal',
            season=oldworld.Season.Summer,
            diceRoller=scriptedRoller(6))
        assert demand.value() == 6

    def test_village_grain_in_spring(self, hamlet):
        assert logic.rollVillageDemand(
            settlement=hamlet,
            cargoName='Grain',
            season=oldworld.Season.Spring,
            diceRoller=scriptedRoller()) is None

    def test_no_village_demand_limit_for_towns(self, altdorf):
        assert logic.rollVillageDemand(
            settlement=altdorf,
            cargoName='Metal',
            season=oldworld.Season.Summer,
            diceRoller=scriptedRoller()) is None


class TestOffer:
    def test_wealth_bonus(self, altdorf, catalog):
        breakdown = logic.calculateOfferPrice(
            catalog=catalog,
            settlement=altdorf,
            cargoName='Grain',
            season=oldworld.Season.Spring,
            quantity=100)
        assert breakdown.hasModifier(logic.PriceModifierType.Wealth)
        assert breakdown.finalPricePerUnit() == pytest.approx(2.1)
        assert breakdown.totalPrice() == pytest.approx(21)

    def test_poor_settlement(self, hamlet, catalog):
        breakdown = logic.calculateOfferPrice(
            catalog=catalog,
            settlement=hamlet,
            cargoName='Metal',
            season=oldworld.Season.Summer,
            quantity=20)
        assert breakdown.finalPricePerUnit() == pytest.approx(6.4)

    def test_average_wealth_has_no_modifier(self, marktdorf, catalog):
        breakdown = logic.calculateOfferPrice(
            catalog=catalog,
            settlement=marktdorf,
            cargoName='Wine/Brandy',
            season=oldworld.Season.Winter,
            quantity=10,
            quality='good')
        assert breakdown.modifiers() == []
        assert breakdown.finalPricePerUnit() == pytest.approx(30)


class TestSaleHaggle:
    @pytest.fixture
    def breakdown(self, altdorf, catalog):
        return logic.calculateOfferPrice(
            catalog=catalog,
            settlement=altdorf,
            cargoName='Grain',
            season=oldworld.Season.Spring,
            quantity=100)

    @pytest.mark.parametrize('haggleResult,price', [
        (logic.HaggleResult(success=True), 2.31),
        (logic.HaggleResult(success=True, hasDealmaker=True), 2.52),
        (logic.HaggleResult(success=False), 2.1),
        (logic.HaggleResult(success=False, gmPenalty=True), 1.89)])
    def test_outcomes(self, breakdown, haggleResult, price):
        haggled = logic.applySaleHaggle(breakdown=breakdown, haggleResult=haggleResult)
        assert haggled.hasModifier(logic.PriceModifierType.Haggle)
        assert haggled.finalPricePerUnit() == pytest.approx(price)

    def test_mapping_result(self, breakdown):
        haggled = logic.applySaleHaggle(breakdown=breakdown, haggleResult={'success': True})
        assert haggled.finalPricePerUnit() == pytest.approx(2.31)
        assert haggled.modifiers()[-1].description() == 'Successful haggle (+10%)'

    def test_invalid_result(self, breakdown):
        with pytest.raises(oldworld.InvalidArgumentException):
            logic.applySaleHaggle(breakdown=breakdown, haggleResult=True)


class TestSpecialSales:
    def test_desperate_sale(self, altdorf, catalog):
        breakdown = logic.calculateDesperateSalePrice(
            catalog=catalog,
            settlement=altdorf,
            cargoName='Wine/Brandy',
            season=oldworld.Season.Autumn,
            quantity=30,
            quality='good')
        assert breakdown.basePricePerUnit() == pytest.approx(27)
        assert breakdown.finalPricePerUnit() == pytest.approx(13.5)
        assert breakdown.hasModifier(logic.PriceModifierType.DesperateSale)

    def test_desperate_sale_needs_trade_centre(self, farmingVillage, catalog):
        assert logic.calculateDesperateSalePrice(
            catalog=catalog,
            settlement=farmingVillage,
            cargoName='Grain',
            season=oldworld.Season.Autumn,
            quantity=30) is None

    def test_rumour_sale(self, altdorf, catalog):
        breakdown = logic.calculateRumourSalePrice(
            catalog=catalog,
            settlement=altdorf,
            cargoName='grain',
            season=oldworld.Season.Summer,
            quantity=100,
            rumour=logic.Rumour(settlementName='Altdorf', cargoName='Grain', source='Dock gossip'))
        assert breakdown.finalPricePerUnit() == pytest.approx(6)
        assert breakdown.totalPrice() == pytest.approx(60)
        assert breakdown.modifiers()[0].description() == 'Rumoured demand from Dock gossip (+100%)'

    def test_rumour_for_elsewhere(self, altdorf, catalog):
        assert logic.calculateRumourSalePrice(
            catalog=catalog,
            settlement=altdorf,
            cargoName='Grain',
            season=oldworld.Season.Summer,
            quantity=100,
            rumour=logic.Rumour(settlementName='Nuln', cargoName='Grain')) is None

    def test_rumour_needs_names(self):
        with pytest.raises(oldworld.InvalidArgumentException):
            logic.Rumour(settlementName='', cargoName='Grain')


class TestAttemptSale:
    def test_sale(self, altdorf, catalog):
        result = _sell(altdorf, catalog, scriptedRoller(50))
        assert result.isSuccessful()
        assert result.saleType() == logic.SaleType.Normal
        assert result.buyerCheck().chance().value() == 70
        assert result.quantitySold() == 100
        assert result.quantityRemaining() == 0
        assert result.equilibrium().supply() == 116
        assert result.equilibrium().demand() == 84
        assert result.priceBreakdown().totalPrice() == pytest.approx(21)
        assert result.haggleTest() is None

    def test_no_buyer(self, altdorf, catalog):
        result = _sell(altdorf, catalog, scriptedRoller(90))
        assert not result.isSuccessful()
        assert result.saleType() is None
        assert result.quantitySold() == 0
        assert result.quantityRemaining() == 100
        assert result.partialBuyerCheck() is None

    def test_partial_sale(self, altdorf, catalog):
        result = _sell(altdorf, catalog, scriptedRoller(90, 30), allowPartialSale=True)
        assert result.isSuccessful()
        assert result.saleType() == logic.SaleType.Partial
        assert not result.buyerCheck().available()
        assert result.partialBuyerCheck().available()
        assert result.quantitySold() == 50
        assert result.quantityRemaining() == 50
        assert result.priceBreakdown().totalPrice() == pytest.approx(10.5)

    def test_partial_sale_without_buyer(self, altdorf, catalog):
        result = _sell(altdorf, catalog, scriptedRoller(90, 95), allowPartialSale=True)
        assert not result.isSuccessful()
        assert not result.partialBuyerCheck().available()
        assert result.quantityRemaining() == 100

    def test_too_little_to_split(self, altdorf, catalog):
        result = _sell(altdorf, catalog, scriptedRoller(90), quantity=1, allowPartialSale=True)
        assert not result.isSuccessful()
        assert result.partialBuyerCheck() is None

    def test_haggle(self, altdorf, catalog):
        result = _sell(
            altdorf,
            catalog,
            scriptedRoller(
                50, # Buyer roll
                50, # Buyer skill percentile
                0.5, # Buyer skill variance draw
                20, # Player haggle roll
                90), # Buyer haggle roll
            playerSkill=60)
        # 57 from wealth, -5 as grain isn't scarce in Altdorf
        assert result.buyerSkill().value() == 52
        assert result.haggleTest().result().success()
        assert result.priceBreakdown().finalPricePerUnit() == pytest.approx(2.31)
        assert result.priceBreakdown().totalPrice() == pytest.approx(23.1)

    def test_haggle_result(self, altdorf, catalog):
        result = _sell(
            altdorf,
            catalog,
            scriptedRoller(50),
            haggleResult=logic.HaggleResult(success=True, hasDealmaker=True))
        assert result.buyerSkill() is None
        assert result.priceBreakdown().finalPricePerUnit() == pytest.approx(2.52)

    def test_scarce_cargo(self, marktdorf, catalog):
        result = _sell(marktdorf, catalog, scriptedRoller(30))
        assert result.equilibrium().state() == logic.EquilibriumState.Undersupplied
        assert result.priceBreakdown().hasModifier(logic.PriceModifierType.Market)
        assert result.priceBreakdown().finalPricePerUnit() == pytest.approx(2.2)

    def test_village_limit(self, hamlet, catalog):
        result = _sell(hamlet, catalog, scriptedRoller(6), cargoName='Metal', quantity=20, season=oldworld.Season.Summer)
        assert result.isSuccessful()
        assert result.saleType() == logic.SaleType.Village
        assert result.buyerCheck() is None
        assert result.villageDemand().value() == 6
        assert result.quantitySold() == 6
        assert result.quantityRemaining() == 14
        assert result.priceBreakdown().totalPrice() == pytest.approx(3.84)
        assert result.notes() == ['Hamlet will only take 6 EP']

    def test_village_takes_everything(self, hamlet, catalog):
        result = _sell(hamlet, catalog, scriptedRoller(8), cargoName='Metal', quantity=5, season=oldworld.Season.Summer)
        assert result.quantitySold() == 5
        assert result.notes() == []

    def test_village_grain_in_spring(self, hamlet, catalog):
        result = _sell(hamlet, catalog, scriptedRoller(10), quantity=50)
        assert result.saleType() == logic.SaleType.Normal
        assert result.villageDemand() is None
        assert result.buyerCheck().chance().value() == 10
        assert result.priceBreakdown().totalPrice() == pytest.approx(8)

    def test_not_eligible(self, altdorf, catalog):
        result = _sell(
            altdorf,
            catalog,
            scriptedRoller(),
            purchaseSettlementName='Altdorf',
            daysSincePurchase=2)
        assert not result.isSuccessful()
        assert not result.eligibility().canSell()
        assert result.eligibility().daysRemaining() == 5
        assert result.rolls() == []
        assert len(result.notes()) == 1

    def test_desperate(self, altdorf, catalog):
        result = _sell(
            altdorf,
            catalog,
            scriptedRoller(),
            cargoName='Wine/Brandy',
            quantity=30,
            season=oldworld.Season.Autumn,
            desperate=True)
        assert result.saleType() == logic.SaleType.Desperate
        assert result.priceBreakdown().quality() == 'average'
        assert result.priceBreakdown().totalPrice() == pytest.approx(27)
        assert result.rolls() == []

    def test_desperate_away_from_trade_centre(self, farmingVillage, catalog):
        result = _sell(farmingVillage, catalog, scriptedRoller(), desperate=True)
        assert not result.isSuccessful()
        assert result.notes() == ['Ubersreik Farms isn\'t a trade centre so won\'t take a desperate sale']

    def test_rumour(self, altdorf, catalog):
        result = _sell(
            altdorf,
            catalog,
            scriptedRoller(),
            season=oldworld.Season.Summer,
            desperate=True,
            rumour=logic.Rumour(settlementName='Altdorf', cargoName='Grain'))
        assert result.saleType() == logic.SaleType.Rumour
        assert result.priceBreakdown().totalPrice() == pytest.approx(60)

    def test_rumour_for_elsewhere(self, altdorf, catalog):
        result = _sell(
            altdorf,
            catalog,
            scriptedRoller(50),
            season=oldworld.Season.Summer,
            rumour=logic.Rumour(settlementName='Nuln', cargoName='Grain'))
        assert result.saleType() == logic.SaleType.Normal
        assert result.priceBreakdown().totalPrice() == pytest.approx(31.5)

    def test_quality_ignored_for_ungraded_cargo(self, altdorf, catalog):
        result = _sell(altdorf, catalog, scriptedRoller(50), quality='excellent')
        assert result.priceBreakdown().quality() == 'average'

    def test_invalid_arguments(self, altdorf, catalog):
        with pytest.raises(oldworld.InvalidArgumentException):
            _sell(altdorf, catalog, scriptedRoller(), quantity=0)
        with pytest.raises(oldworld.InvalidArgumentException):
            _sell(altdorf, catalog, scriptedRoller(), season=None)
        with pytest.raises(oldworld.NotFoundException):
            _sell(altdorf, catalog, scriptedRoller(), cargoName='Dragon Eggs')

    def test_serialise(self, altdorf, catalog):
        result = _sell(altdorf, catalog, scriptedRoller(90, 30), allowPartialSale=True)
        data = logic.serialiseSaleResult(result=result, includeCalculations=False)
        assert data['saleType'] == 'partial'
        assert data['quantityOffered'] == 100
        assert data['quantitySold'] == 50
        assert data['eligibility']['canSell']
        assert data['buyer']['state'] == 'unavailable'
        assert data['partialBuyer']['state'] == 'available'
        assert data['equilibrium']['supply'] == 116
        assert data['priceBreakdown']['cargoName'] == 'Grain'
        assert [roll['value'] for roll in data['rolls']] == [90, 30]
