import common
import logging
import logic
import oldworld
import typing

# NOTE: Nothing in here modifies the settlement, catalog or tables passed in.
# All the results are new objects so merchants for the same settlement can be
# generated independently.

class PurchaseResult(object):
    def __init__(
            self,
            settlementName: str,
            season: oldworld.Season,
            availability: logic.AvailabilityCheck,
            cargoSelection: typing.Optional[logic.CargoSelection] = None,
            cargoSize: typing.Optional[logic.CargoSize] = None,
            availableQuantity: typing.Optional[common.ScalarCalculation] = None,
            qualityRoll: typing.Optional[logic.QualityRoll] = None,
            priceBreakdown: typing.Optional[logic.PriceBreakdown] = None,
            merchantSkill: typing.Optional[common.ScalarCalculation] = None,
            haggleTest: typing.Optional[logic.HaggleTest] = None,
            rolls: typing.Optional[typing.Iterable[common.DiceRollResult]] = None,
            notes: typing.Optional[typing.Iterable[str]] = None
            ) -> None:
        self._settlementName = settlementName
        self._season = season
        self._availability = availability
        self._cargoSelection = cargoSelection
        self._cargoSize = cargoSize
        self._availableQuantity = availableQuantity
        self._qualityRoll = qualityRoll
        self._priceBreakdown = priceBreakdown
        self._merchantSkill = merchantSkill
        self._haggleTest = haggleTest
        self._rolls = list(rolls) if rolls else []
        self._notes = list(notes) if notes else []

    def settlementName(self) -> str:
        return self._settlementName

    def season(self) -> oldworld.Season:
        return self._season

    def availability(self) -> logic.AvailabilityCheck:
        return self._availability

    def cargoSelection(self) -> typing.Optional[logic.CargoSelection]:
        return self._cargoSelection

    def cargoName(self) -> typing.Optional[str]:
        return self._cargoSelection.cargoName() if self._cargoSelection else None

    def cargoSize(self) -> typing.Optional[logic.CargoSize]:
        return self._cargoSize

    # The quantity the merchant has after any desperation penalty, this can
    # be less than the cargo size
    def availableQuantity(self) -> typing.Optional[int]:
        return self._availableQuantity.value() if self._availableQuantity else None

    def quantity(self) -> typing.Optional[int]:
        return self._priceBreakdown.quantity() if self._priceBreakdown else None

    def qualityRoll(self) -> typing.Optional[logic.QualityRoll]:
        return self._qualityRoll

    def priceBreakdown(self) -> typing.Optional[logic.PriceBreakdown]:
        return self._priceBreakdown

    def merchantSkill(self) -> typing.Optional[common.ScalarCalculation]:
        return self._merchantSkill

    def haggleTest(self) -> typing.Optional[logic.HaggleTest]:
        return self._haggleTest

    def rolls(self) -> typing.List[common.DiceRollResult]:
        return list(self._rolls)

    def notes(self) -> typing.List[str]:
        return list(self._notes)

    def isSuccessful(self) -> bool:
        return self._availability.available() and self._priceBreakdown is not None

def generateMerchantSkill(
        settlement: oldworld.Settlement,
        diceRoller: common.DiceRoller,
        skillModel: logic.SkillModel
        ) -> common.ScalarCalculation:
    if skillModel == logic.SkillModel.LegacyDice:
        return logic.calculateLegacySkill(diceRoller=diceRoller)
    percentile = diceRoller.makePercentileRoll(name='Merchant Skill Percentile')
    return logic.calculateSkill(
        settlement=settlement,
        percentile=percentile.value(),
        diceRoller=diceRoller)

# Graded cargo has its quality rolled unless a quality was asked for
def _qualityForCargo(
        catalog: oldworld.CargoCatalog,
        cargoName: str,
        quality: typing.Optional[str],
        settlement: oldworld.Settlement,
        diceRoller: common.DiceRoller
        ) -> typing.Tuple[str, typing.Optional[logic.QualityRoll]]:
    cargoType = catalog.get(cargoName)
    # Ungraded cargo is always average, asking for anything else would fail
    if not cargoType.hasQualityTiers():
        return (oldworld.AverageQualityTier, None)
    if quality:
        return (quality, None)
    qualityRoll = logic.rollQuality(
        cargoType=cargoType,
        settlement=settlement,
        diceRoller=diceRoller)
    return (qualityRoll.tier(), qualityRoll)

def generateMerchants(
        settlement: oldworld.Settlement,
        season: oldworld.Season,
        catalog: oldworld.CargoCatalog,
        diceRoller: common.DiceRoller,
        skillModel: logic.SkillModel = logic.SkillModel.Percentile,
        quality: typing.Optional[str] = None,
        allowDesperation: bool = False,
        forceDesperation: bool = False, # Attempt desperation for every unavailable merchant, not just desperate markets
        progressCallback: typing.Optional[typing.Callable[[int, int], typing.Any]] = None,
        isCancelledCallback: typing.Optional[typing.Callable[[], bool]] = None
        ) -> typing.List[logic.Merchant]:
    season = oldworld.validateSeason(season)
    slots = logic.calculateMerchantSlots(settlement=settlement)
    totalSlots = slots.totalSlots().value()
    producerSlots = slots.producerSlots().value()

    candidates = logic.buildCandidateTable(
        settlement=settlement,
        season=season,
        catalog=catalog)
    if candidates.isEmpty():
        logging.warning(f'No cargo candidates for {settlement.name()} in {season.value}')
        return []

    merchants = []
    for index in range(totalSlots):
        if isCancelledCallback and isCancelledCallback():
            logging.debug(f'Merchant generation for {settlement.name()} cancelled after {index} merchants')
            break

        role = logic.MerchantRole.Producer if index < producerSlots else logic.MerchantRole.Seeker
        candidate = candidates.draw(diceRoller=diceRoller)
        cargoName = candidate.cargoName()

        equilibrium = logic.computeEquilibrium(
            settlement=settlement,
            cargoName=cargoName,
            category=candidate.category())
        modifiers = equilibrium.availabilityModifiers(role=role)

        personality = logic.selectPersonality(diceRoller=diceRoller)
        skill = logic.applyPersonality(
            skill=generateMerchantSkill(
                settlement=settlement,
                diceRoller=diceRoller,
                skillModel=skillModel),
            personality=personality,
            model=skillModel)
        if modifiers.skillModifier():
            skill = logic.clampSkill(
                skill=common.Calculator.add(
                    lhs=skill,
                    rhs=common.ScalarCalculation(
                        value=modifiers.skillModifier(),
                        name='Market Skill Modifier')),
                model=skillModel,
                name='Merchant Skill')

        cargoSize = logic.calculateCargoSize(
            settlement=settlement,
            diceRoller=diceRoller)
        quantity = cargoSize.totalSize()
        if modifiers.quantityMultiplier() != 1.0:
            quantity = common.Calculator.floor(
                value=common.Calculator.multiply(
                    lhs=quantity,
                    rhs=common.ScalarCalculation(
                        value=modifiers.quantityMultiplier(),
                        name='Market Quantity Multiplier')),
                name='Merchant Quantity')

        if equilibrium.shouldBlockTrade():
            availability = logic.blockedAvailability(settlement=settlement)
        else:
            availability = logic.checkAvailability(
                settlement=settlement,
                diceRoller=diceRoller)
            if availability.state() == logic.AvailabilityState.Unavailable and allowDesperation and \
                    (forceDesperation or equilibrium.shouldTriggerDesperation()):
                availability = logic.attemptDesperation(
                    check=availability,
                    diceRoller=diceRoller)

        merchantQuality, _ = _qualityForCargo(
            catalog=catalog,
            cargoName=cargoName,
            quality=quality,
            settlement=settlement,
            diceRoller=diceRoller)
        priceBreakdown = logic.calculatePrice(
            catalog=catalog,
            cargoName=cargoName,
            season=season,
            quantity=quantity.value(),
            quality=merchantQuality)
        priceBreakdown = logic.applyMarketModifier(
            breakdown=priceBreakdown,
            priceMultiplier=modifiers.priceMultiplier())

        merchant = logic.Merchant(
            id=logic.merchantId(
                settlementName=settlement.name(),
                cargoName=cargoName,
                role=role,
                index=index),
            role=role,
            cargoName=cargoName,
            skill=skill,
            skillModel=skillModel,
            personality=personality,
            quantity=quantity,
            availability=availability,
            equilibrium=equilibrium,
            priceBreakdown=priceBreakdown)
        if availability.state() == logic.AvailabilityState.DesperateAvailable:
            merchant.applyDesperationPenalties()
        merchants.append(merchant)

        if progressCallback:
            progressCallback(index + 1, totalSlots)

    logging.info(f'Generated {len(merchants)} merchants for {settlement.name()} in {season.value}')
    return merchants

def attemptPurchase(
        settlement: oldworld.Settlement,
        season: oldworld.Season,
        catalog: oldworld.CargoCatalog,
        diceRoller: common.DiceRoller,
        quantity: typing.Optional[int] = None, # None means buy everything available
        quality: typing.Optional[str] = None,
        allowDesperation: bool = False,
        haggleResult: typing.Optional[logic.HaggleResult] = None,
        playerSkill: typing.Optional[int] = None, # Roll the haggle if there isn't a haggle result
        hasDealmaker: bool = False,
        gmPenalty: bool = False,
        skillModel: logic.SkillModel = logic.SkillModel.Percentile,
        seasonalTable: typing.Optional[oldworld.SeasonalCargoTable] = None,
        localGoodsChance: int = 0,
        cargoName: typing.Optional[str] = None # Skip cargo selection and buy this cargo
        ) -> PurchaseResult:
    if season is None:
        raise oldworld.InvalidArgumentException('Season is required to attempt a purchase')
    season = oldworld.validateSeason(season)
    if quantity is not None:
        common.validateMandatoryInt(
            name='Quantity',
            value=quantity,
            min=1,
            errorType=oldworld.InvalidArgumentException)

    availability = logic.checkAvailability(
        settlement=settlement,
        diceRoller=diceRoller)
    if availability.state() == logic.AvailabilityState.Unavailable and allowDesperation:
        availability = logic.attemptDesperation(
            check=availability,
            diceRoller=diceRoller)

    if not availability.available():
        logging.info(f'No cargo available at {settlement.name()}')
        return PurchaseResult(
            settlementName=settlement.name(),
            season=season,
            availability=availability,
            rolls=diceRoller.rolls())

    if cargoName:
        selection = logic.CargoSelection(
            cargoName=catalog.get(cargoName).name(),
            method=logic.CargoSelectionMethod.SpecificGoodsOnly,
            options=[cargoName])
    else:
        selection = logic.selectCargoType(
            settlement=settlement,
            season=season,
            diceRoller=diceRoller,
            catalog=catalog,
            seasonalTable=seasonalTable,
            localGoodsChance=localGoodsChance)

    cargoSize = logic.calculateCargoSize(
        settlement=settlement,
        diceRoller=diceRoller)
    isDesperate = availability.state() == logic.AvailabilityState.DesperateAvailable
    availableQuantity = cargoSize.totalSize()
    if isDesperate:
        availableQuantity = logic.applyDesperationQuantity(quantity=availableQuantity)

    if not selection.isKnownCargo():
        # The cargo is free text from the settlement data so there's no price
        # for it, the GM has to decide one
        note = f'{selection.cargoName()} is not a known cargo type so it has no price'
        logging.warning(note)
        return PurchaseResult(
            settlementName=settlement.name(),
            season=season,
            availability=availability,
            cargoSelection=selection,
            cargoSize=cargoSize,
            availableQuantity=availableQuantity,
            rolls=diceRoller.rolls(),
            notes=[note])

    notes = []
    purchaseQuantity = availableQuantity.value()
    if quantity is not None:
        if quantity > purchaseQuantity:
            notes.append(f'Requested {quantity} EP but only {purchaseQuantity} EP is available')
        else:
            purchaseQuantity = quantity
    isPartialPurchase = purchaseQuantity < availableQuantity.value()

    quality, qualityRoll = _qualityForCargo(
        catalog=catalog,
        cargoName=selection.cargoName(),
        quality=quality,
        settlement=settlement,
        diceRoller=diceRoller)
    priceBreakdown = logic.calculatePrice(
        catalog=catalog,
        cargoName=selection.cargoName(),
        season=season,
        quantity=purchaseQuantity,
        quality=quality,
        isPartialPurchase=isPartialPurchase)
    if isDesperate:
        priceBreakdown = logic.applyPriceModifier(
            breakdown=priceBreakdown,
            type=logic.PriceModifierType.Desperation,
            percentage=logic.DesperationPenalties.PricePercentage,
            description='Desperation penalty (+15%)')

    merchantSkill = None
    haggleTest = None
    if haggleResult is None and playerSkill is not None:
        merchantSkill = generateMerchantSkill(
            settlement=settlement,
            diceRoller=diceRoller,
            skillModel=skillModel)
        if isDesperate:
            merchantSkill = logic.clampSkill(
                skill=logic.applyDesperationSkill(skill=merchantSkill),
                model=skillModel,
                name='Merchant Skill')
        haggleTest = logic.resolveHaggle(
            playerSkill=playerSkill,
            merchantSkill=merchantSkill,
            diceRoller=diceRoller,
            hasDealmaker=hasDealmaker,
            gmPenalty=gmPenalty)
        haggleResult = haggleTest.result()
    if haggleResult is not None:
        priceBreakdown = logic.applyHaggle(
            breakdown=priceBreakdown,
            haggleResult=haggleResult)

    logging.info(
        f'Purchase of {purchaseQuantity} EP of {selection.cargoName()} at {settlement.name()} costs {oldworld.formatCurrency(priceBreakdown.totalPennies())}')
    return PurchaseResult(
        settlementName=settlement.name(),
        season=season,
        availability=availability,
        cargoSelection=selection,
        cargoSize=cargoSize,
        availableQuantity=availableQuantity,
        qualityRoll=qualityRoll,
        priceBreakdown=priceBreakdown,
        merchantSkill=merchantSkill,
        haggleTest=haggleTest,
        rolls=diceRoller.rolls(),
        notes=notes)
