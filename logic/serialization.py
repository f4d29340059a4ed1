import common
import enum
import logic
import json
import oldworld
import packaging
import packaging.version
import typing

def serialiseEnum(
        enumValue: enum.Enum
        ) -> typing.Mapping[str, typing.Any]:
    return {'enum': enumValue.name}

def deserialiseEnum(
        type: typing.Type[enum.Enum],
        data: typing.Mapping[str, typing.Any]
        ) -> enum.Enum:
    name = data.get('enum')
    if name == None:
        raise RuntimeError('Enum is missing the name element')

    if name not in type.__members__:
        raise RuntimeError(f'Unknown enum name "{name}"')
    return type.__members__[name]

def _serialiseOptionalCalculation(
        calculation: typing.Optional[common.ScalarCalculation],
        includeCalculations: bool
        ) -> typing.Optional[typing.Mapping[str, typing.Any]]:
    if calculation is None:
        return None
    return common.serialiseCalculation(
        calculation=calculation,
        includeVersion=False, # Don't include version to avoid bloat, v1.0 is currently assumed
        includeHierarchy=includeCalculations)

def _getMandatory(
        data: typing.Mapping[str, typing.Any],
        key: str,
        description: str
        ) -> typing.Any:
    value = data.get(key)
    if value is None:
        raise RuntimeError(f'{description} is missing the {key} property')
    return value

#  ██████╗ ██████╗ ██╗ ██████╗███████╗
#  ██╔══██╗██╔══██╗██║██╔════╝██╔════╝
#  ██████╔╝██████╔╝██║██║     █████╗
#  ██╔═══╝ ██╔══██╗██║██║     ██╔══╝
#  ██║     ██║  ██║██║╚██████╗███████╗
#  ╚═╝     ╚═╝  ╚═╝╚═╝ ╚═════╝╚══════╝

# v1.0 - Initial version
_PriceBreakdownVersion = packaging.version.Version('1.0')

def serialisePriceModifier(
        modifier: logic.PriceModifier
        ) -> typing.Mapping[str, typing.Any]:
    return {
        'type': serialiseEnum(enumValue=modifier.type()),
        'description': modifier.description(),
        'percentage': _serialiseOptionalCalculation(
            calculation=modifier.percentage(),
            includeCalculations=False),
        'amount': modifier.amount()}

def deserialisePriceModifier(
        jsonData: typing.Mapping[str, typing.Any]
        ) -> logic.PriceModifier:
    description = _getMandatory(jsonData, 'description', 'Price modifier')
    if not isinstance(description, str):
        raise RuntimeError('Price modifier description property is not a string')
    amount = _getMandatory(jsonData, 'amount', 'Price modifier')
    if not isinstance(amount, (int, float)):
        raise RuntimeError('Price modifier amount property is not a number')
    return logic.PriceModifier(
        type=deserialiseEnum(
            type=logic.PriceModifierType,
            data=_getMandatory(jsonData, 'type', 'Price modifier')),
        description=description,
        percentage=common.deserialiseCalculation(
            jsonData=_getMandatory(jsonData, 'percentage', 'Price modifier')),
        amount=amount)

def serialisePriceBreakdown(
        breakdown: logic.PriceBreakdown,
        includeVersion: bool = True,
        includeCalculations: bool = True
        ) -> typing.Mapping[str, typing.Any]:
    jsonData = {}
    if includeVersion:
        jsonData['version'] = str(_PriceBreakdownVersion)
    jsonData.update({
        'cargoName': breakdown.cargoName(),
        'season': breakdown.season().value,
        'quality': breakdown.quality(),
        'quantity': _serialiseOptionalCalculation(
            calculation=breakdown.quantityCalculation(),
            includeCalculations=includeCalculations),
        'basePricePerUnit': _serialiseOptionalCalculation(
            calculation=breakdown.basePriceCalculation(),
            includeCalculations=includeCalculations),
        'modifiers': [serialisePriceModifier(modifier=modifier) for modifier in breakdown.modifiers()],
        'finalPricePerUnit': _serialiseOptionalCalculation(
            calculation=breakdown.finalPriceCalculation(),
            includeCalculations=includeCalculations),
        'totalPrice': breakdown.totalPrice(),
        'totalPennies': breakdown.totalPennies(),
        'totalPriceString': oldworld.formatCurrency(breakdown.totalPennies())})
    return jsonData

def deserialisePriceBreakdown(
        jsonData: typing.Mapping[str, typing.Any]
        ) -> logic.PriceBreakdown:
    common.checkSerialisationVersion(
        jsonData=jsonData,
        supportedVersion=_PriceBreakdownVersion,
        description='Price breakdown')

    cargoName = _getMandatory(jsonData, 'cargoName', 'Price breakdown')
    if not isinstance(cargoName, str):
        raise RuntimeError('Price breakdown cargoName property is not a string')
    try:
        season = oldworld.Season.fromString(_getMandatory(jsonData, 'season', 'Price breakdown'))
    except oldworld.InvalidArgumentException as ex:
        raise RuntimeError(f'Price breakdown season property is invalid ({str(ex)})')
    quality = jsonData.get('quality', oldworld.AverageQualityTier)

    modifiers = _getMandatory(jsonData, 'modifiers', 'Price breakdown')
    if not isinstance(modifiers, list):
        raise RuntimeError('Price breakdown modifiers property is not a list')

    return logic.PriceBreakdown(
        cargoName=cargoName,
        season=season,
        quality=quality,
        quantity=common.deserialiseCalculation(
            jsonData=_getMandatory(jsonData, 'quantity', 'Price breakdown')),
        basePricePerUnit=common.deserialiseCalculation(
            jsonData=_getMandatory(jsonData, 'basePricePerUnit', 'Price breakdown')),
        modifiers=[deserialisePriceModifier(jsonData=modifier) for modifier in modifiers],
        finalPricePerUnit=common.deserialiseCalculation(
            jsonData=_getMandatory(jsonData, 'finalPricePerUnit', 'Price breakdown')))

#  ███╗   ███╗███████╗██████╗  ██████╗██╗  ██╗ █████╗ ███╗   ██╗████████╗
#  ████╗ ████║██╔════╝██╔══██╗██╔════╝██║  ██║██╔══██╗████╗  ██║╚══██╔══╝
#  ██╔████╔██║█████╗  ██████╔╝██║     ███████║███████║██╔██╗ ██║   ██║
#  ██║╚██╔╝██║██╔══╝  ██╔══██╗██║     ██╔══██║██╔══██║██║╚██╗██║   ██║
#  ██║ ╚═╝ ██║███████╗██║  ██║╚██████╗██║  ██║██║  ██║██║ ╚████║   ██║
#  ╚═╝     ╚═╝╚══════╝╚═╝  ╚═╝ ╚═════╝╚═╝  ╚═╝╚═╝  ╚═╝╚═╝  ╚═══╝   ╚═╝

def _serialiseAvailability(
        availability: logic.AvailabilityCheck
        ) -> typing.Mapping[str, typing.Any]:
    roll = availability.roll()
    desperationChance = availability.desperationChance()
    desperationRoll = availability.desperationRoll()
    return {
        'state': availability.state().value,
        'chance': availability.chance().value(),
        'roll': roll.value() if roll else None,
        'desperationChance': desperationChance.value() if desperationChance else None,
        'desperationRoll': desperationRoll.value() if desperationRoll else None}

def _serialiseEquilibrium(
        equilibrium: logic.Equilibrium
        ) -> typing.Mapping[str, typing.Any]:
    return {
        'supply': equilibrium.supply(),
        'demand': equilibrium.demand(),
        'state': equilibrium.state().value,
        'transfers': [
            {'direction': transfer.direction().value,
             'amount': transfer.amount(),
             'description': transfer.description(),
             'clamped': transfer.clamped()}
            for transfer in equilibrium.transfers()]}

def serialiseMerchant(
        merchant: logic.Merchant,
        includeCalculations: bool = True
        ) -> typing.Mapping[str, typing.Any]:
    priceBreakdown = merchant.priceBreakdown()
    return {
        'id': merchant.id(),
        'role': merchant.role().value,
        'cargoName': merchant.cargoName(),
        'skill': _serialiseOptionalCalculation(
            calculation=merchant.skillCalculation(),
            includeCalculations=includeCalculations),
        'skillModel': serialiseEnum(enumValue=merchant.skillModel()),
        'personality': merchant.personality().name(),
        'quantity': merchant.quantity(),
        'availability': _serialiseAvailability(availability=merchant.availability()),
        'desperationApplied': merchant.desperationApplied(),
        'equilibrium': _serialiseEquilibrium(equilibrium=merchant.equilibrium()),
        'priceBreakdown': serialisePriceBreakdown(
            breakdown=priceBreakdown,
            includeVersion=False,
            includeCalculations=includeCalculations) if priceBreakdown else None}

#  ██████╗ ██╗   ██╗██████╗  ██████╗██╗  ██╗ █████╗ ███████╗███████╗
#  ██╔══██╗██║   ██║██╔══██╗██╔════╝██║  ██║██╔══██╗██╔════╝██╔════╝
#  ██████╔╝██║   ██║██████╔╝██║     ███████║███████║███████╗█████╗
#  ██╔═══╝ ██║   ██║██╔══██╗██║     ██╔══██║██╔══██║╚════██║██╔══╝
#  ██║     ╚██████╔╝██║  ██║╚██████╗██║  ██║██║  ██║███████║███████╗
#  ╚═╝      ╚═════╝ ╚═╝  ╚═╝ ╚═════╝╚═╝  ╚═╝╚═╝  ╚═╝╚══════╝╚══════╝

# v1.0 - Initial version
_PurchaseResultVersion = packaging.version.Version('1.0')

def _serialiseSkillTest(
        test: logic.SkillTest
        ) -> typing.Mapping[str, typing.Any]:
    return {
        'name': test.name(),
        'skill': test.skill().value(),
        'roll': test.roll().value(),
        'success': test.success(),
        'degrees': test.degrees()}

def serialisePurchaseResult(
        result: logic.PurchaseResult,
        includeCalculations: bool = True
        ) -> typing.Mapping[str, typing.Any]:
    jsonData = {
        'version': str(_PurchaseResultVersion),
        'settlement': result.settlementName(),
        'season': result.season().value,
        'availability': _serialiseAvailability(availability=result.availability())}

    selection = result.cargoSelection()
    if selection:
        jsonData['cargoSelection'] = {
            'cargoName': selection.cargoName(),
            'method': selection.method().value,
            'options': selection.options(),
            'roll': selection.roll().value() if selection.roll() else None}

    cargoSize = result.cargoSize()
    if cargoSize:
        jsonData['cargoSize'] = {
            'baseMultiplier': cargoSize.baseMultiplier().value(),
            'roll1': cargoSize.roll1().value(),
            'roll2': cargoSize.roll2().value() if cargoSize.roll2() else None,
            'sizeMultiplier': cargoSize.sizeMultiplier().value(),
            'totalSize': cargoSize.totalSize().value(),
            'tradeBonus': cargoSize.tradeBonus()}
        jsonData['availableQuantity'] = result.availableQuantity()

    qualityRoll = result.qualityRoll()
    if qualityRoll and qualityRoll.isRolled():
        jsonData['qualityRoll'] = {
            'roll': qualityRoll.roll().value(),
            'score': qualityRoll.score().value(),
            'grade': qualityRoll.grade().value,
            'tier': qualityRoll.tier()}

    priceBreakdown = result.priceBreakdown()
    if priceBreakdown:
        jsonData['priceBreakdown'] = serialisePriceBreakdown(
            breakdown=priceBreakdown,
            includeVersion=False,
            includeCalculations=includeCalculations)

    haggleTest = result.haggleTest()
    if haggleTest:
        jsonData['haggle'] = {
            'success': haggleTest.result().success(),
            'hasDealmaker': haggleTest.result().hasDealmaker(),
            'gmPenalty': haggleTest.result().gmPenalty(),
            'description': haggleTest.description(),
            'player': _serialiseSkillTest(test=haggleTest.playerTest()),
            'merchant': _serialiseSkillTest(test=haggleTest.merchantTest())}

    jsonData['rolls'] = [
        {'name': roll.name(), 'value': roll.result().value()}
        for roll in result.rolls()]
    if result.notes():
        jsonData['notes'] = result.notes()
    return jsonData

def writePurchaseResult(
        result: logic.PurchaseResult,
        path: str,
        includeCalculations: bool = True
        ) -> None:
    with open(path, 'w', encoding='UTF8') as file:
        json.dump(serialisePurchaseResult(result=result, includeCalculations=includeCalculations), file, indent=4)

def writeMerchants(
        merchants: typing.Iterable[logic.Merchant],
        path: str,
        includeCalculations: bool = True
        ) -> None:
    jsonData = {
        'version': str(_PurchaseResultVersion),
        'merchants': [serialiseMerchant(merchant=merchant, includeCalculations=includeCalculations) for merchant in merchants]}
    with open(path, 'w', encoding='UTF8') as file:
        json.dump(jsonData, file, indent=4)

#  ███████╗ █████╗ ██╗     ███████╗
#  ██╔════╝██╔══██╗██║     ██╔════╝
#  ███████╗███████║██║     █████╗
#  ╚════██║██╔══██║██║     ██╔══╝
#  ███████║██║  ██║███████╗███████╗
#  ╚══════╝╚═╝  ╚═╝╚══════╝╚══════╝

# v1.0 - Initial version
_SaleResultVersion = packaging.version.Version('1.0')

def serialiseSaleResult(
        result: logic.SaleResult,
        includeCalculations: bool = True
        ) -> typing.Mapping[str, typing.Any]:
    eligibility = result.eligibility()
    saleType = result.saleType()
    jsonData = {
        'version': str(_SaleResultVersion),
        'settlement': result.settlementName(),
        'season': result.season().value,
        'cargoName': result.cargoName(),
        'saleType': saleType.value if saleType else None,
        'quantityOffered': result.quantityOffered(),
        'quantitySold': result.quantitySold(),
        'eligibility': {
            'canSell': eligibility.canSell(),
            'reason': eligibility.reason(),
            'daysRemaining': eligibility.daysRemaining()}}

    equilibrium = result.equilibrium()
    if equilibrium:
        jsonData['equilibrium'] = _serialiseEquilibrium(equilibrium=equilibrium)
    buyerCheck = result.buyerCheck()
    if buyerCheck:
        jsonData['buyer'] = _serialiseAvailability(availability=buyerCheck)
    partialBuyerCheck = result.partialBuyerCheck()
    if partialBuyerCheck:
        jsonData['partialBuyer'] = _serialiseAvailability(availability=partialBuyerCheck)
    villageDemand = result.villageDemand()
    if villageDemand is not None:
        jsonData['villageDemand'] = villageDemand.value()

    priceBreakdown = result.priceBreakdown()
    if priceBreakdown:
        jsonData['priceBreakdown'] = serialisePriceBreakdown(
            breakdown=priceBreakdown,
            includeVersion=False,
            includeCalculations=includeCalculations)

    haggleTest = result.haggleTest()
    if haggleTest:
        jsonData['haggle'] = {
            'success': haggleTest.result().success(),
            'hasDealmaker': haggleTest.result().hasDealmaker(),
            'gmPenalty': haggleTest.result().gmPenalty(),
            'description': haggleTest.description(),
            'player': _serialiseSkillTest(test=haggleTest.playerTest()),
            'buyer': _serialiseSkillTest(test=haggleTest.merchantTest())}

    jsonData['rolls'] = [
        {'name': roll.name(), 'value': roll.result().value()}
        for roll in result.rolls()]
    if result.notes():
        jsonData['notes'] = result.notes()
    return jsonData

def writeSaleResult(
        result: logic.SaleResult,
        path: str,
        includeCalculations: bool = True
        ) -> None:
    with open(path, 'w', encoding='UTF8') as file:
        json.dump(serialiseSaleResult(result=result, includeCalculations=includeCalculations), file, indent=4)
