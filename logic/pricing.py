import common
import enum
import logging
import oldworld
import typing

"""
Prices are per unit block (10 EP) in gold crowns.
1. Start with the cargo's price for the season
2. Multiply by the quality tier multiplier (average is x1)
3. Apply each modifier in turn as a percentage of the running price, so a
   +10% followed by a -10% is x1.1 x 0.9, not +0%
   - Partial purchase (buying less than the full cargo): +10%
   - Market (supply/demand balance makes the merchant charge more)
   - Desperation (the merchant knows the players need the deal): +15%
   - Haggle (see logic.haggle)
4. Total price is the final price per block x (quantity / 10)

Sale offers use the same breakdown with their own modifiers (see
logic.selling).
"""

_PartialPurchasePercentage = common.ScalarCalculation(
    value=10,
    name='Partial Purchase Percentage')
_UnitBlockSize = common.ScalarCalculation(
    value=oldworld.UnitBlockSize,
    name='Unit Block Size (EP)')

# NOTE: The values are written to the audit log so shouldn't be changed
class PriceModifierType(enum.Enum):
    PartialPurchase = 'partial_purchase'
    Desperation = 'desperation'
    Market = 'market'
    Haggle = 'haggle'
    Wealth = 'wealth'
    DesperateSale = 'desperate_sale'
    Rumour = 'rumour'

class PriceModifier(object):
    def __init__(
            self,
            type: PriceModifierType,
            description: str,
            percentage: common.ScalarCalculation,
            amount: float
            ) -> None:
        self._type = type
        self._description = description
        self._percentage = percentage
        self._amount = amount

    def type(self) -> PriceModifierType:
        return self._type

    def description(self) -> str:
        return self._description

    # Signed change to the price per unit block, in crowns
    def amount(self) -> float:
        return self._amount

    # Signed percentage of the running price
    def percentage(self) -> common.ScalarCalculation:
        return self._percentage

class PriceBreakdown(object):
    def __init__(
            self,
            cargoName: str,
            season: oldworld.Season,
            quality: str,
            quantity: common.ScalarCalculation,
            basePricePerUnit: common.ScalarCalculation,
            modifiers: typing.Iterable[PriceModifier] = None,
            finalPricePerUnit: typing.Optional[common.ScalarCalculation] = None
            ) -> None:
        self._cargoName = cargoName
        self._season = season
        self._quality = quality
        self._quantity = quantity
        self._basePricePerUnit = basePricePerUnit
        self._modifiers = tuple(modifiers) if modifiers else ()
        self._finalPricePerUnit = finalPricePerUnit if finalPricePerUnit else basePricePerUnit

        self._totalPrice = common.Calculator.multiply(
            lhs=self._finalPricePerUnit,
            rhs=common.Calculator.divideFloat(
                lhs=self._quantity,
                rhs=_UnitBlockSize),
            name=f'{cargoName} Total Price')

    def cargoName(self) -> str:
        return self._cargoName

    def season(self) -> oldworld.Season:
        return self._season

    def quality(self) -> str:
        return self._quality

    def quantity(self) -> int:
        return self._quantity.value()

    def basePricePerUnit(self) -> float:
        return self._basePricePerUnit.value()

    def modifiers(self) -> typing.List[PriceModifier]:
        return list(self._modifiers)

    def hasModifier(self, type: PriceModifierType) -> bool:
        for modifier in self._modifiers:
            if modifier.type() == type:
                return True
        return False

    def finalPricePerUnit(self) -> float:
        return self._finalPricePerUnit.value()

    def totalPrice(self) -> float:
        return self._totalPrice.value()

    def totalPennies(self) -> int:
        return oldworld.crownsToPennies(self._totalPrice.value())

    def basePriceCalculation(self) -> common.ScalarCalculation:
        return self._basePricePerUnit

    def finalPriceCalculation(self) -> common.ScalarCalculation:
        return self._finalPricePerUnit

    def quantityCalculation(self) -> common.ScalarCalculation:
        return self._quantity

    # The total price calculation, its hierarchy is the full audit of how
    # the price was arrived at
    def calculation(self) -> common.ScalarCalculation:
        return self._totalPrice

    def withQuantity(self, quantity: common.ScalarCalculation) -> 'PriceBreakdown':
        return PriceBreakdown(
            cargoName=self._cargoName,
            season=self._season,
            quality=self._quality,
            quantity=quantity,
            basePricePerUnit=self._basePricePerUnit,
            modifiers=self._modifiers,
            finalPricePerUnit=self._finalPricePerUnit)

def _validateQuantity(quantity: typing.Union[int, float]) -> None:
    common.validateMandatoryFloat(
        name='Quantity',
        value=quantity,
        errorType=oldworld.InvalidArgumentException)
    if quantity <= 0:
        raise oldworld.InvalidArgumentException('Quantity must be greater than 0')

def calculateBasePrice(
        catalog: oldworld.CargoCatalog,
        cargoName: str,
        season: oldworld.Season,
        quality: typing.Optional[str] = None
        ) -> common.ScalarCalculation:
    if season is None:
        raise oldworld.InvalidArgumentException('Season is required to calculate a price')
    season = oldworld.validateSeason(season)
    cargoType = catalog.get(cargoName)

    seasonalPrice = cargoType.seasonalPrice(season=season)
    multiplier = cargoType.qualityMultiplier(tier=quality)
    if multiplier.value() == 1:
        return common.Calculator.equals(
            value=seasonalPrice,
            name=f'{cargoType.name()} Base Price')
    return common.Calculator.multiply(
        lhs=seasonalPrice,
        rhs=multiplier,
        name=f'{cargoType.name()} Base Price')

def applyPriceModifier(
        breakdown: PriceBreakdown,
        type: PriceModifierType,
        percentage: typing.Union[int, float, common.ScalarCalculation],
        description: str
        ) -> PriceBreakdown:
    if not isinstance(percentage, common.ScalarCalculation):
        percentage = common.ScalarCalculation(
            value=percentage,
            name=f'{description} Percentage')

    runningPrice = breakdown.finalPriceCalculation()
    if percentage.value() == 0:
        # Recorded so the audit shows the modifier was considered
        newPrice = runningPrice
    else:
        newPrice = common.Calculator.applyPercentage(
            value=runningPrice,
            percentage=percentage,
            name=f'{breakdown.cargoName()} Price Per Unit')

    modifier = PriceModifier(
        type=type,
        description=description,
        percentage=percentage,
        amount=newPrice.value() - runningPrice.value())
    logging.debug(
        f'Applied {type.value} modifier of {common.formatNumber(percentage.value(), alwaysIncludeSign=True)}% to {breakdown.cargoName()} price, now {common.formatNumber(newPrice.value())}')

    return PriceBreakdown(
        cargoName=breakdown.cargoName(),
        season=breakdown.season(),
        quality=breakdown.quality(),
        quantity=breakdown.quantityCalculation(),
        basePricePerUnit=breakdown.basePriceCalculation(),
        modifiers=breakdown.modifiers() + [modifier],
        finalPricePerUnit=newPrice)

def calculatePrice(
        catalog: oldworld.CargoCatalog,
        cargoName: str,
        season: oldworld.Season,
        quantity: typing.Union[int, float],
        quality: typing.Optional[str] = None,
        isPartialPurchase: bool = False
        ) -> PriceBreakdown:
    _validateQuantity(quantity=quantity)
    if not quality:
        quality = oldworld.AverageQualityTier

    basePrice = calculateBasePrice(
        catalog=catalog,
        cargoName=cargoName,
        season=season,
        quality=quality)

    breakdown = PriceBreakdown(
        cargoName=catalog.get(cargoName).name(),
        season=oldworld.validateSeason(season),
        quality=quality.lower(),
        quantity=common.ScalarCalculation(
            value=quantity,
            name='Quantity (EP)'),
        basePricePerUnit=basePrice)

    if isPartialPurchase:
        breakdown = applyPriceModifier(
            breakdown=breakdown,
            type=PriceModifierType.PartialPurchase,
            percentage=_PartialPurchasePercentage,
            description='Partial purchase penalty (+10%)')

    return breakdown

def applyMarketModifier(
        breakdown: PriceBreakdown,
        priceMultiplier: float
        ) -> PriceBreakdown:
    if priceMultiplier == 1.0:
        return breakdown
    percentage = common.roundHalfUp((priceMultiplier - 1.0) * 100)
    return applyPriceModifier(
        breakdown=breakdown,
        type=PriceModifierType.Market,
        percentage=common.ScalarCalculation(
            value=percentage,
            name='Market Price Percentage'),
        description=f'Market conditions ({common.formatNumber(percentage, alwaysIncludeSign=True)}%)')

class SeasonalPriceComparison(object):
    def __init__(
            self,
            cargoName: str,
            quality: str,
            prices: typing.Mapping[oldworld.Season, common.ScalarCalculation]
            ) -> None:
        self._cargoName = cargoName
        self._quality = quality
        self._prices = dict(prices)

    def cargoName(self) -> str:
        return self._cargoName

    def quality(self) -> str:
        return self._quality

    def price(self, season: oldworld.Season) -> common.ScalarCalculation:
        return self._prices[oldworld.validateSeason(season)]

    # Cheapest season, the earliest season wins ties
    def bestBuyingSeason(self) -> oldworld.Season:
        return min(oldworld.Season, key=lambda season: self._prices[season].value())

    # Dearest season, the earliest season wins ties
    def bestSellingSeason(self) -> oldworld.Season:
        return max(oldworld.Season, key=lambda season: self._prices[season].value())

    def priceRange(self) -> typing.Tuple[float, float]:
        values = [price.value() for price in self._prices.values()]
        return (min(values), max(values))

def compareSeasonalPrices(
        catalog: oldworld.CargoCatalog,
        cargoName: str,
        quality: typing.Optional[str] = None
        ) -> SeasonalPriceComparison:
    prices = {}
    for season in oldworld.Season:
        prices[season] = calculateBasePrice(
            catalog=catalog,
            cargoName=cargoName,
            season=season,
            quality=quality)
    return SeasonalPriceComparison(
        cargoName=catalog.get(cargoName).name(),
        quality=(quality or oldworld.AverageQualityTier).lower(),
        prices=prices)
