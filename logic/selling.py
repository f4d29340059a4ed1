import common
import enum
import logging
import logic
import oldworld
import typing

"""
Selling
1. Cargo can't be sold at the settlement it was bought at until a week has
   passed
2. Find a buyer. The chance is settlement size x 10, +30 at a trade centre,
   capped at 100. Roll d100, a roll at or under the chance finds a buyer.
   - If the market for the cargo is blocked there's no buyer
   - Villages only have limited demand (other than for grain in spring).
     Instead of the buyer roll a D10 gives the most EP the village will take
   - If no buyer is found the players can offer half the cargo (rounded down)
     and roll again
3. The offer is the cargo's price for the season and quality with the
   settlement wealth modifier from _WealthOfferPercentageMap applied, then the
   market modifier for a seeker (buyers pay more when the cargo is scarce)
4. Haggling is the same opposed test as when buying, but the outcome works in
   the seller's favour
   - Success: +10%
   - Success with the Dealmaker talent: +20%
   - Failure where the GM applies a penalty: -10%
   - Failure without a penalty: 0%

Special sales skip the buyer roll and haggling
- Desperate: any trade centre will take the cargo at half its base price
- Rumour: where a rumour says the cargo is wanted it sells for double its
  base price
"""

_BuyerChanceMultiplier = common.ScalarCalculation(
    value=10,
    name='Buyer Chance Multiplier')
_TradeCentreBuyerBonus = common.ScalarCalculation(
    value=30,
    name='Trade Centre Buyer Bonus')
_MaxBuyerChance = common.ScalarCalculation(
    value=100,
    name='Max Buyer Chance')

VillageSize = 1
SaleWaitingPeriodDays = 7

_VillageGrainSeason = oldworld.Season.Spring
_VillageGrainCargo = 'grain'

_WealthOfferPercentageMap = {
    1: -50,
    2: -20,
    3: 0,
    4: 5,
    5: 10
}

_DesperateSalePercentage = common.ScalarCalculation(
    value=-50,
    name='Desperate Sale Percentage')
_RumourSalePercentage = common.ScalarCalculation(
    value=100,
    name='Rumour Sale Percentage')

_SaleHaggleSuccessPercentage = common.ScalarCalculation(
    value=10,
    name='Successful Sale Haggle Percentage')
_SaleHaggleDealmakerPercentage = common.ScalarCalculation(
    value=20,
    name='Successful Sale Haggle With Dealmaker Percentage')
_SaleHagglePenaltyPercentage = common.ScalarCalculation(
    value=-10,
    name='Failed Sale Haggle Penalty Percentage')
_SaleHaggleFailurePercentage = common.ScalarCalculation(
    value=0,
    name='Failed Sale Haggle Percentage')

# NOTE: The values are written to the sale results so shouldn't be changed
class SaleType(enum.Enum):
    Normal = 'normal'
    Partial = 'partial'
    Village = 'village'
    Desperate = 'desperate'
    Rumour = 'rumour'

class SellingEligibility(object):
    def __init__(
            self,
            canSell: bool,
            reason: str,
            daysRemaining: int = 0
            ) -> None:
        self._canSell = canSell
        self._reason = reason
        self._daysRemaining = daysRemaining

    def canSell(self) -> bool:
        return self._canSell

    def reason(self) -> str:
        return self._reason

    # Days until the cargo can be sold at the settlement it was bought at
    def daysRemaining(self) -> int:
        return self._daysRemaining

class Rumour(object):
    def __init__(
            self,
            settlementName: str,
            cargoName: str,
            source: str = ''
            ) -> None:
        self._settlementName = common.validateMandatoryStr(
            name='Rumour settlement',
            value=settlementName,
            allowEmpty=False,
            errorType=oldworld.InvalidArgumentException)
        self._cargoName = common.validateMandatoryStr(
            name='Rumour cargo',
            value=cargoName,
            allowEmpty=False,
            errorType=oldworld.InvalidArgumentException)
        self._source = source

    def settlementName(self) -> str:
        return self._settlementName

    def cargoName(self) -> str:
        return self._cargoName

    def source(self) -> str:
        return self._source

    def applies(
            self,
            settlement: oldworld.Settlement,
            cargoName: str
            ) -> bool:
        return self._settlementName.lower() == settlement.name().lower() and \
            self._cargoName.lower() == cargoName.lower()

class SaleResult(object):
    def __init__(
            self,
            settlementName: str,
            season: oldworld.Season,
            cargoName: str,
            quantityOffered: int,
            eligibility: SellingEligibility,
            saleType: typing.Optional[SaleType] = None,
            equilibrium: typing.Optional[logic.Equilibrium] = None,
            buyerCheck: typing.Optional[logic.AvailabilityCheck] = None,
            partialBuyerCheck: typing.Optional[logic.AvailabilityCheck] = None,
            villageDemand: typing.Optional[common.ScalarCalculation] = None,
            priceBreakdown: typing.Optional[logic.PriceBreakdown] = None,
            buyerSkill: typing.Optional[common.ScalarCalculation] = None,
            haggleTest: typing.Optional[logic.HaggleTest] = None,
            rolls: typing.Optional[typing.Iterable[common.DiceRollResult]] = None,
            notes: typing.Optional[typing.Iterable[str]] = None
            ) -> None:
        self._settlementName = settlementName
        self._season = season
        self._cargoName = cargoName
        self._quantityOffered = quantityOffered
        self._eligibility = eligibility
        self._saleType = saleType
        self._equilibrium = equilibrium
        self._buyerCheck = buyerCheck
        self._partialBuyerCheck = partialBuyerCheck
        self._villageDemand = villageDemand
        self._priceBreakdown = priceBreakdown
        self._buyerSkill = buyerSkill
        self._haggleTest = haggleTest
        self._rolls = list(rolls) if rolls else []
        self._notes = list(notes) if notes else []

    def settlementName(self) -> str:
        return self._settlementName

    def season(self) -> oldworld.Season:
        return self._season

    def cargoName(self) -> str:
        return self._cargoName

    def quantityOffered(self) -> int:
        return self._quantityOffered

    def quantitySold(self) -> int:
        return self._priceBreakdown.quantity() if self._priceBreakdown else 0

    def quantityRemaining(self) -> int:
        return self._quantityOffered - self.quantitySold()

    def eligibility(self) -> SellingEligibility:
        return self._eligibility

    # None if nothing was sold
    def saleType(self) -> typing.Optional[SaleType]:
        return self._saleType

    def equilibrium(self) -> typing.Optional[logic.Equilibrium]:
        return self._equilibrium

    def buyerCheck(self) -> typing.Optional[logic.AvailabilityCheck]:
        return self._buyerCheck

    # The second buyer check when half the cargo was offered
    def partialBuyerCheck(self) -> typing.Optional[logic.AvailabilityCheck]:
        return self._partialBuyerCheck

    # Most EP a village will take
    def villageDemand(self) -> typing.Optional[common.ScalarCalculation]:
        return self._villageDemand

    def priceBreakdown(self) -> typing.Optional[logic.PriceBreakdown]:
        return self._priceBreakdown

    def buyerSkill(self) -> typing.Optional[common.ScalarCalculation]:
        return self._buyerSkill

    def haggleTest(self) -> typing.Optional[logic.HaggleTest]:
        return self._haggleTest

    def rolls(self) -> typing.List[common.DiceRollResult]:
        return list(self._rolls)

    def notes(self) -> typing.List[str]:
        return list(self._notes)

    def isSuccessful(self) -> bool:
        return self._priceBreakdown is not None

def checkSellingEligibility(
        settlement: oldworld.Settlement,
        purchaseSettlementName: typing.Optional[str] = None,
        daysSincePurchase: typing.Optional[int] = None # In game days, None if unknown
        ) -> SellingEligibility:
    if not purchaseSettlementName or purchaseSettlementName.lower() != settlement.name().lower():
        return SellingEligibility(
            canSell=True,
            reason=f'Not bought at {settlement.name()}' if purchaseSettlementName else 'No purchase location')

    if daysSincePurchase is not None:
        common.validateMandatoryInt(
            name='Days since purchase',
            value=daysSincePurchase,
            min=0,
            errorType=oldworld.InvalidArgumentException)
        if daysSincePurchase >= SaleWaitingPeriodDays:
            return SellingEligibility(
                canSell=True,
                reason=f'Bought at {settlement.name()} {daysSincePurchase} days ago')

    daysRemaining = SaleWaitingPeriodDays - (daysSincePurchase or 0)
    return SellingEligibility(
        canSell=False,
        reason=f'Cargo bought at {settlement.name()} can\'t be sold there for another {daysRemaining} days',
        daysRemaining=daysRemaining)

def calculateBuyerChance(settlement: oldworld.Settlement) -> common.ScalarCalculation:
    chance = common.Calculator.multiply(
        lhs=common.ScalarCalculation(
            value=settlement.size(),
            name=f'{settlement.name()} Size'),
        rhs=_BuyerChanceMultiplier)
    if settlement.isTradeCenter():
        chance = common.Calculator.add(
            lhs=chance,
            rhs=_TradeCentreBuyerBonus)
    return common.Calculator.min(
        lhs=chance,
        rhs=_MaxBuyerChance,
        name='Buyer Chance')

def findBuyer(
        settlement: oldworld.Settlement,
        diceRoller: common.DiceRoller
        ) -> logic.AvailabilityCheck:
    chance = calculateBuyerChance(settlement=settlement)
    roll = diceRoller.makePercentileRoll(name='Buyer Roll')
    state = logic.AvailabilityState.Available \
        if roll.value() <= chance.value() else \
        logic.AvailabilityState.Unavailable
    logging.debug(
        f'Buyer roll of {roll.value()} against {chance.value()} at {settlement.name()} is {state.value}')
    return logic.AvailabilityCheck(
        state=state,
        chance=chance,
        roll=roll)

# Returns None if the settlement doesn't have limited demand for the cargo
def rollVillageDemand(
        settlement: oldworld.Settlement,
        cargoName: str,
        season: oldworld.Season,
        diceRoller: common.DiceRoller
        ) -> typing.Optional[common.ScalarCalculation]:
    if settlement.size() != VillageSize:
        return None
    if season == _VillageGrainSeason and cargoName.lower() == _VillageGrainCargo:
        return None
    demand = diceRoller.makeRoll(
        dieCount=1,
        dieType=common.DieType.D10,
        name='Village Demand (EP)')
    logging.debug(f'{settlement.name()} will take at most {demand.value()} EP of {cargoName}')
    return demand

def calculateOfferPrice(
        catalog: oldworld.CargoCatalog,
        settlement: oldworld.Settlement,
        cargoName: str,
        season: oldworld.Season,
        quantity: typing.Union[int, float],
        quality: typing.Optional[str] = None
        ) -> logic.PriceBreakdown:
    breakdown = logic.calculatePrice(
        catalog=catalog,
        cargoName=cargoName,
        season=season,
        quantity=quantity,
        quality=quality)

    percentage = _WealthOfferPercentageMap[settlement.wealth()]
    if not percentage:
        return breakdown
    return logic.applyPriceModifier(
        breakdown=breakdown,
        type=logic.PriceModifierType.Wealth,
        percentage=common.ScalarCalculation(
            value=percentage,
            name=f'{settlement.name()} Wealth Offer Percentage'),
        description=f'{settlement.name()} wealth ({common.formatNumber(percentage, alwaysIncludeSign=True)}%)')

def saleHagglePercentage(haggleResult: logic.HaggleResult) -> common.ScalarCalculation:
    if haggleResult.success():
        return _SaleHaggleDealmakerPercentage if haggleResult.hasDealmaker() else _SaleHaggleSuccessPercentage
    return _SaleHagglePenaltyPercentage if haggleResult.gmPenalty() else _SaleHaggleFailurePercentage

def applySaleHaggle(
        breakdown: logic.PriceBreakdown,
        haggleResult: typing.Union[logic.HaggleResult, typing.Mapping[str, typing.Any]]
        ) -> logic.PriceBreakdown:
    if not isinstance(breakdown, logic.PriceBreakdown):
        raise oldworld.InvalidArgumentException('Haggling can only be applied to a price breakdown')
    if isinstance(haggleResult, typing.Mapping):
        haggleResult = logic.HaggleResult.fromData(data=haggleResult)
    elif not isinstance(haggleResult, logic.HaggleResult):
        raise oldworld.InvalidArgumentException(
            f'Haggle result must be a HaggleResult not {type(haggleResult).__name__}')

    percentage = saleHagglePercentage(haggleResult=haggleResult)
    if haggleResult.success():
        description = 'Successful haggle{talent} ({percentage}%)'
    elif haggleResult.gmPenalty():
        description = 'Failed haggle with GM penalty ({percentage}%)'
    else:
        description = 'Failed haggle (no change)'
    return logic.applyPriceModifier(
        breakdown=breakdown,
        type=logic.PriceModifierType.Haggle,
        percentage=percentage,
        description=description.format(
            talent=' with Dealmaker' if haggleResult.hasDealmaker() else '',
            percentage=common.formatNumber(percentage.value(), alwaysIncludeSign=True)))

# Returns None if the settlement isn't a trade centre
def calculateDesperateSalePrice(
        catalog: oldworld.CargoCatalog,
        settlement: oldworld.Settlement,
        cargoName: str,
        season: oldworld.Season,
        quantity: typing.Union[int, float],
        quality: typing.Optional[str] = None
        ) -> typing.Optional[logic.PriceBreakdown]:
    if not settlement.isTradeCenter():
        logging.debug(f'{settlement.name()} isn\'t a trade centre so there are no desperate sales')
        return None
    return logic.applyPriceModifier(
        breakdown=logic.calculatePrice(
            catalog=catalog,
            cargoName=cargoName,
            season=season,
            quantity=quantity,
            quality=quality),
        type=logic.PriceModifierType.DesperateSale,
        percentage=_DesperateSalePercentage,
        description='Desperate sale (-50%)')

# Returns None if the rumour isn't about this settlement and cargo
def calculateRumourSalePrice(
        catalog: oldworld.CargoCatalog,
        settlement: oldworld.Settlement,
        cargoName: str,
        season: oldworld.Season,
        quantity: typing.Union[int, float],
        rumour: Rumour,
        quality: typing.Optional[str] = None
        ) -> typing.Optional[logic.PriceBreakdown]:
    if not rumour.applies(settlement=settlement, cargoName=cargoName):
        return None
    description = 'Rumoured demand (+100%)'
    if rumour.source():
        description = f'Rumoured demand from {rumour.source()} (+100%)'
    return logic.applyPriceModifier(
        breakdown=logic.calculatePrice(
            catalog=catalog,
            cargoName=cargoName,
            season=season,
            quantity=quantity,
            quality=quality),
        type=logic.PriceModifierType.Rumour,
        percentage=_RumourSalePercentage,
        description=description)

def attemptSale(
        settlement: oldworld.Settlement,
        season: oldworld.Season,
        catalog: oldworld.CargoCatalog,
        diceRoller: common.DiceRoller,
        cargoName: str,
        quantity: int,
        quality: typing.Optional[str] = None,
        purchaseSettlementName: typing.Optional[str] = None,
        daysSincePurchase: typing.Optional[int] = None,
        haggleResult: typing.Optional[logic.HaggleResult] = None,
        playerSkill: typing.Optional[int] = None, # Roll the haggle if there isn't a haggle result
        hasDealmaker: bool = False,
        gmPenalty: bool = False,
        skillModel: logic.SkillModel = logic.SkillModel.Percentile,
        allowPartialSale: bool = False,
        desperate: bool = False,
        rumour: typing.Optional[Rumour] = None
        ) -> SaleResult:
    if season is None:
        raise oldworld.InvalidArgumentException('Season is required to attempt a sale')
    season = oldworld.validateSeason(season)
    common.validateMandatoryInt(
        name='Quantity',
        value=quantity,
        min=1,
        errorType=oldworld.InvalidArgumentException)
    cargoType = catalog.get(cargoName)
    cargoName = cargoType.name()
    if not cargoType.hasQualityTiers():
        quality = None

    eligibility = checkSellingEligibility(
        settlement=settlement,
        purchaseSettlementName=purchaseSettlementName,
        daysSincePurchase=daysSincePurchase)
    if not eligibility.canSell():
        logging.info(eligibility.reason())
        return SaleResult(
            settlementName=settlement.name(),
            season=season,
            cargoName=cargoName,
            quantityOffered=quantity,
            eligibility=eligibility,
            notes=[eligibility.reason()])

    if rumour:
        priceBreakdown = calculateRumourSalePrice(
            catalog=catalog,
            settlement=settlement,
            cargoName=cargoName,
            season=season,
            quantity=quantity,
            rumour=rumour,
            quality=quality)
        if priceBreakdown:
            logging.info(
                f'Rumour sale of {quantity} EP of {cargoName} at {settlement.name()} for {oldworld.formatCurrency(priceBreakdown.totalPennies())}')
            return SaleResult(
                settlementName=settlement.name(),
                season=season,
                cargoName=cargoName,
                quantityOffered=quantity,
                eligibility=eligibility,
                saleType=SaleType.Rumour,
                priceBreakdown=priceBreakdown,
                rolls=diceRoller.rolls())

    if desperate:
        priceBreakdown = calculateDesperateSalePrice(
            catalog=catalog,
            settlement=settlement,
            cargoName=cargoName,
            season=season,
            quantity=quantity,
            quality=quality)
        if not priceBreakdown:
            note = f'{settlement.name()} isn\'t a trade centre so won\'t take a desperate sale'
            logging.info(note)
            return SaleResult(
                settlementName=settlement.name(),
                season=season,
                cargoName=cargoName,
                quantityOffered=quantity,
                eligibility=eligibility,
                rolls=diceRoller.rolls(),
                notes=[note])
        logging.info(
            f'Desperate sale of {quantity} EP of {cargoName} at {settlement.name()} for {oldworld.formatCurrency(priceBreakdown.totalPennies())}')
        return SaleResult(
            settlementName=settlement.name(),
            season=season,
            cargoName=cargoName,
            quantityOffered=quantity,
            eligibility=eligibility,
            saleType=SaleType.Desperate,
            priceBreakdown=priceBreakdown,
            rolls=diceRoller.rolls())

    equilibrium = logic.computeEquilibrium(
        settlement=settlement,
        cargoName=cargoName,
        category=cargoType.category())
    modifiers = equilibrium.availabilityModifiers(role=logic.MerchantRole.Seeker)

    notes = []
    buyerCheck = None
    partialBuyerCheck = None
    villageDemand = None
    saleType = SaleType.Normal
    saleQuantity = quantity
    if equilibrium.shouldBlockTrade():
        buyerCheck = logic.blockedAvailability(settlement=settlement)
        notes.append(f'Nobody at {settlement.name()} is trading {cargoName}')
    else:
        villageDemand = rollVillageDemand(
            settlement=settlement,
            cargoName=cargoName,
            season=season,
            diceRoller=diceRoller)
        if villageDemand is not None:
            saleType = SaleType.Village
            if villageDemand.value() < quantity:
                saleQuantity = villageDemand.value()
                notes.append(f'{settlement.name()} will only take {saleQuantity} EP')
        else:
            buyerCheck = findBuyer(
                settlement=settlement,
                diceRoller=diceRoller)
            if not buyerCheck.available() and allowPartialSale and quantity // 2 > 0:
                saleQuantity = quantity // 2
                partialBuyerCheck = findBuyer(
                    settlement=settlement,
                    diceRoller=diceRoller)
                saleType = SaleType.Partial

    buyerFound = villageDemand is not None or \
        (partialBuyerCheck.available() if partialBuyerCheck else buyerCheck.available())
    if not buyerFound:
        logging.info(f'No buyer for {cargoName} at {settlement.name()}')
        return SaleResult(
            settlementName=settlement.name(),
            season=season,
            cargoName=cargoName,
            quantityOffered=quantity,
            eligibility=eligibility,
            equilibrium=equilibrium,
            buyerCheck=buyerCheck,
            partialBuyerCheck=partialBuyerCheck,
            rolls=diceRoller.rolls(),
            notes=notes)

    priceBreakdown = calculateOfferPrice(
        catalog=catalog,
        settlement=settlement,
        cargoName=cargoName,
        season=season,
        quantity=saleQuantity,
        quality=quality)
    priceBreakdown = logic.applyMarketModifier(
        breakdown=priceBreakdown,
        priceMultiplier=modifiers.priceMultiplier())

    buyerSkill = None
    haggleTest = None
    if haggleResult is None and playerSkill is not None:
        buyerSkill = logic.generateMerchantSkill(
            settlement=settlement,
            diceRoller=diceRoller,
            skillModel=skillModel)
        if modifiers.skillModifier():
            buyerSkill = logic.clampSkill(
                skill=common.Calculator.add(
                    lhs=buyerSkill,
                    rhs=common.ScalarCalculation(
                        value=modifiers.skillModifier(),
                        name='Market Skill Modifier')),
                model=skillModel,
                name='Buyer Skill')
        haggleTest = logic.resolveHaggle(
            playerSkill=playerSkill,
            merchantSkill=buyerSkill,
            diceRoller=diceRoller,
            hasDealmaker=hasDealmaker,
            gmPenalty=gmPenalty)
        haggleResult = haggleTest.result()
    if haggleResult is not None:
        priceBreakdown = applySaleHaggle(
            breakdown=priceBreakdown,
            haggleResult=haggleResult)

    logging.info(
        f'Sale of {saleQuantity} EP of {cargoName} at {settlement.name()} for {oldworld.formatCurrency(priceBreakdown.totalPennies())}')
    return SaleResult(
        settlementName=settlement.name(),
        season=season,
        cargoName=cargoName,
        quantityOffered=quantity,
        eligibility=eligibility,
        saleType=saleType,
        equilibrium=equilibrium,
        buyerCheck=buyerCheck,
        partialBuyerCheck=partialBuyerCheck,
        villageDemand=villageDemand,
        priceBreakdown=priceBreakdown,
        buyerSkill=buyerSkill,
        haggleTest=haggleTest,
        rolls=diceRoller.rolls(),
        notes=notes)
