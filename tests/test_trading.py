"""
Tests for availability, desperation, pricing and haggling.
"""

import common
import logic
import oldworld
import pytest

from conftest import scriptedRoller


class TestAvailability:
    def test_chance(self, altdorf):
        assert logic.calculateAvailabilityChance(settlement=altdorf).value() == 80
        metropolis = oldworld.Settlement(name='Metropolis', size=5, wealth=5)
        assert logic.calculateAvailabilityChance(settlement=metropolis).value() == 100

    @pytest.mark.parametrize('roll,state', [
        (1, logic.AvailabilityState.Available),
        (50, logic.AvailabilityState.Available),
        (80, logic.AvailabilityState.Available),
        (81, logic.AvailabilityState.Unavailable),
        (90, logic.AvailabilityState.Unavailable)])
    def test_check(self, altdorf, roll, state):
        check = logic.checkAvailability(settlement=altdorf, diceRoller=scriptedRoller(roll))
        assert check.state() == state
        assert check.roll().value() == roll
        assert check.available() == (state == logic.AvailabilityState.Available)

    def test_desperation_success(self, altdorf):
        check = logic.checkAvailability(settlement=altdorf, diceRoller=scriptedRoller(90))
        desperate = logic.attemptDesperation(check=check, diceRoller=scriptedRoller(64))
        assert desperate.desperationChance().value() == 64
        assert desperate.state() == logic.AvailabilityState.DesperateAvailable
        assert desperate.available()
        assert desperate.isDesperate()
        assert desperate.roll().value() == 90

    def test_desperation_failure(self, altdorf):
        check = logic.checkAvailability(settlement=altdorf, diceRoller=scriptedRoller(90))
        desperate = logic.attemptDesperation(check=check, diceRoller=scriptedRoller(65))
        assert desperate.state() == logic.AvailabilityState.DesperateUnavailable
        assert not desperate.available()
        assert desperate.isDesperate()

    def test_desperation_needs_unavailable_result(self, altdorf):
        check = logic.checkAvailability(settlement=altdorf, diceRoller=scriptedRoller(10))
        with pytest.raises(oldworld.InvalidArgumentException):
            logic.attemptDesperation(check=check, diceRoller=scriptedRoller(10))

    def test_blocked(self, altdorf):
        check = logic.blockedAvailability(settlement=altdorf)
        assert check.state() == logic.AvailabilityState.Unavailable
        assert check.chance().value() == 0
        assert check.roll() is None

    def test_penalties(self):
        quantity = logic.applyDesperationQuantity(quantity=common.ScalarCalculation(value=480))
        assert quantity.value() == 360
        skill = logic.applyDesperationSkill(skill=common.ScalarCalculation(value=57))
        assert skill.value() == 45


class TestPricing:
    def test_base_price(self, catalog):
        price = logic.calculateBasePrice(catalog=catalog, cargoName='Grain', season=oldworld.Season.Winter)
        assert price.value() == 4

    def test_quality_multiplier(self, catalog):
        price = logic.calculateBasePrice(
            catalog=catalog,
            cargoName='Wine/Brandy',
            season=oldworld.Season.Summer,
            quality='good')
        assert price.value() == 18

    def test_season_is_required(self, catalog):
        with pytest.raises(oldworld.InvalidArgumentException):
            logic.calculateBasePrice(catalog=catalog, cargoName='Grain', season=None)

    def test_unknown_cargo(self, catalog):
        with pytest.raises(oldworld.NotFoundException):
            logic.calculateBasePrice(catalog=catalog, cargoName='Timber', season=oldworld.Season.Spring)

    @pytest.mark.parametrize('quantity', [0, -10])
    def test_invalid_quantity(self, catalog, quantity):
        with pytest.raises(oldworld.InvalidArgumentException):
            logic.calculatePrice(catalog=catalog, cargoName='Grain', season=oldworld.Season.Spring, quantity=quantity)

    def test_full_purchase(self, catalog):
        breakdown = logic.calculatePrice(
            catalog=catalog,
            cargoName='grain',
            season=oldworld.Season.Spring,
            quantity=100)
        assert breakdown.cargoName() == 'Grain'
        assert breakdown.quality() == 'average'
        assert breakdown.finalPricePerUnit() == 2
        assert breakdown.totalPrice() == 20
        assert breakdown.totalPennies() == 4800
        assert breakdown.modifiers() == []

    def test_partial_purchase(self, catalog):
        breakdown = logic.calculatePrice(
            catalog=catalog,
            cargoName='Grain',
            season=oldworld.Season.Spring,
            quantity=100,
            isPartialPurchase=True)
        assert breakdown.basePricePerUnit() == 2
        assert breakdown.finalPricePerUnit() == pytest.approx(2.2)
        assert breakdown.totalPrice() == pytest.approx(22)
        assert breakdown.totalPennies() == 5280
        assert breakdown.hasModifier(logic.PriceModifierType.PartialPurchase)
        assert breakdown.modifiers()[0].amount() == pytest.approx(0.2)

    def test_modifiers_compound(self, catalog):
        breakdown = logic.calculatePrice(
            catalog=catalog,
            cargoName='Grain',
            season=oldworld.Season.Spring,
            quantity=10)
        breakdown = logic.applyPriceModifier(
            breakdown=breakdown,
            type=logic.PriceModifierType.Market,
            percentage=10,
            description='Up')
        breakdown = logic.applyPriceModifier(
            breakdown=breakdown,
            type=logic.PriceModifierType.Haggle,
            percentage=-10,
            description='Down')
        assert breakdown.finalPricePerUnit() == pytest.approx(1.98)

    def test_zero_modifier_is_recorded(self, catalog):
        original = logic.calculatePrice(catalog=catalog, cargoName='Metal', season=oldworld.Season.Spring, quantity=50)
        breakdown = logic.applyPriceModifier(
            breakdown=original,
            type=logic.PriceModifierType.Haggle,
            percentage=0,
            description='Nothing')
        assert breakdown.finalPricePerUnit() == 8
        assert len(breakdown.modifiers()) == 1
        assert breakdown.modifiers()[0].amount() == 0
        assert original.modifiers() == []

    def test_market_modifier(self, catalog):
        original = logic.calculatePrice(catalog=catalog, cargoName='Metal', season=oldworld.Season.Spring, quantity=50)
        assert logic.applyMarketModifier(breakdown=original, priceMultiplier=1.0) is original
        breakdown = logic.applyMarketModifier(breakdown=original, priceMultiplier=1.1)
        assert breakdown.hasModifier(logic.PriceModifierType.Market)
        assert breakdown.modifiers()[0].percentage().value() == 10
        assert breakdown.finalPricePerUnit() == pytest.approx(8.8)

    def test_with_quantity(self, catalog):
        breakdown = logic.calculatePrice(catalog=catalog, cargoName='Grain', season=oldworld.Season.Spring, quantity=100)
        smaller = breakdown.withQuantity(quantity=common.ScalarCalculation(value=50))
        assert smaller.quantity() == 50
        assert smaller.totalPrice() == 10
        assert breakdown.quantity() == 100

    def test_seasonal_comparison(self, catalog):
        comparison = logic.compareSeasonalPrices(catalog=catalog, cargoName='Grain')
        assert comparison.bestBuyingSeason() == oldworld.Season.Autumn
        assert comparison.bestSellingSeason() == oldworld.Season.Winter
        assert comparison.priceRange() == (1, 4)
        assert comparison.price(oldworld.Season.Summer).value() == 3

    def test_seasonal_comparison_ties_go_to_earliest_season(self, catalog):
        comparison = logic.compareSeasonalPrices(catalog=catalog, cargoName='Metal')
        assert comparison.bestBuyingSeason() == oldworld.Season.Spring

    def test_seasonal_comparison_with_quality(self, catalog):
        comparison = logic.compareSeasonalPrices(catalog=catalog, cargoName='Wine/Brandy', quality='Excellent')
        assert comparison.quality() == 'excellent'
        assert comparison.priceRange() == (24, 40)


@pytest.fixture
def partialGrain(catalog):
    return logic.calculatePrice(
        catalog=catalog,
        cargoName='Grain',
        season=oldworld.Season.Spring,
        quantity=100,
        isPartialPurchase=True)


class TestHaggleResult:
    def test_successful_haggle(self, partialGrain):
        breakdown = logic.applyHaggle(breakdown=partialGrain, haggleResult=logic.HaggleResult(success=True))
        assert breakdown.finalPricePerUnit() == pytest.approx(1.98)
        assert breakdown.totalPrice() == pytest.approx(19.8)
        assert breakdown.hasModifier(logic.PriceModifierType.Haggle)

    def test_dealmaker(self, partialGrain):
        breakdown = logic.applyHaggle(
            breakdown=partialGrain,
            haggleResult=logic.HaggleResult(success=True, hasDealmaker=True))
        assert breakdown.finalPricePerUnit() == pytest.approx(2.2 * 0.8)

    def test_failure(self, partialGrain):
        breakdown = logic.applyHaggle(breakdown=partialGrain, haggleResult=logic.HaggleResult(success=False))
        assert breakdown.finalPricePerUnit() == pytest.approx(2.2)
        assert len(breakdown.modifiers()) == 2

        breakdown = logic.applyHaggle(
            breakdown=partialGrain,
            haggleResult=logic.HaggleResult(success=False, gmPenalty=True))
        assert breakdown.finalPricePerUnit() == pytest.approx(2.42)

    def test_mapping_result(self, partialGrain):
        breakdown = logic.applyHaggle(breakdown=partialGrain, haggleResult={'success': True})
        assert breakdown.finalPricePerUnit() == pytest.approx(1.98)

    @pytest.mark.parametrize('data', [{}, {'success': 'yes'}, {'success': True, 'hasDealmaker': 1}])
    def test_malformed_mapping(self, partialGrain, data):
        with pytest.raises(oldworld.InvalidArgumentException):
            logic.applyHaggle(breakdown=partialGrain, haggleResult=data)

    def test_invalid_inputs(self, partialGrain):
        with pytest.raises(oldworld.InvalidArgumentException):
            logic.applyHaggle(breakdown=partialGrain, haggleResult=True)
        with pytest.raises(oldworld.InvalidArgumentException):
            logic.applyHaggle(breakdown={'price': 2}, haggleResult=logic.HaggleResult(success=True))
        with pytest.raises(TypeError):
            logic.HaggleResult(success='yes')

    def test_outcomes(self, partialGrain):
        outcomes = logic.haggleOutcomes(breakdown=partialGrain)
        prices = [breakdown.finalPricePerUnit() for _, breakdown in outcomes]
        assert prices == pytest.approx([1.98, 1.76, 2.2, 2.42])
        assert len(logic.haggleOutcomes(breakdown=partialGrain, includeGmPenalty=False)) == 3


class TestSkillTest:
    @pytest.mark.parametrize('roll,success,degrees', [
        (50, True, 1),
        (41, True, 1),
        (30, True, 3),
        (1, True, 5),
        (51, False, 1),
        (60, False, 1),
        (61, False, 2),
        (100, False, 5)])
    def test_degrees(self, roll, success, degrees):
        test = logic.performSkillTest(name='Test', skill=50, diceRoller=scriptedRoller(roll))
        assert test.success() == success
        assert test.degrees() == degrees

    def test_skill_is_clamped(self):
        test = logic.performSkillTest(name='Test', skill=90, diceRoller=scriptedRoller(100), modifier=20)
        assert test.skill().value() == 100
        assert test.success()


class TestResolveHaggle:
    def test_player_more_degrees(self):
        haggle = logic.resolveHaggle(playerSkill=50, merchantSkill=40, diceRoller=scriptedRoller(20, 35))
        assert haggle.result().success()
        assert haggle.playerTest().degrees() == 4
        assert haggle.merchantTest().degrees() == 1

    def test_tie_goes_to_merchant(self):
        haggle = logic.resolveHaggle(playerSkill=50, merchantSkill=50, diceRoller=scriptedRoller(45, 45))
        assert not haggle.result().success()

    def test_only_player_passes(self):
        haggle = logic.resolveHaggle(playerSkill=30, merchantSkill=80, diceRoller=scriptedRoller(30, 81))
        assert haggle.result().success()

    def test_only_merchant_passes(self):
        haggle = logic.resolveHaggle(playerSkill=80, merchantSkill=30, diceRoller=scriptedRoller(81, 30))
        assert not haggle.result().success()

    def test_both_fail(self):
        haggle = logic.resolveHaggle(playerSkill=50, merchantSkill=40, diceRoller=scriptedRoller(55, 90))
        assert haggle.result().success()
        assert 'failure' in haggle.description()

    def test_talent_and_penalty_carried(self):
        haggle = logic.resolveHaggle(
            playerSkill=50,
            merchantSkill=40,
            diceRoller=scriptedRoller(20, 35),
            hasDealmaker=True,
            gmPenalty=True)
        assert haggle.result().hasDealmaker()
        assert haggle.result().percentage().value() == -20
