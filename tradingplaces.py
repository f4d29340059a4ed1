#!/usr/bin/env python3

import app
import argparse
import common
import json
import logging
import logic
import oldworld
import os
import pathlib
import sys
import typing

# Works on the assumption the main file is in the root of the code/data hierarchy
def _installDirectory() -> str:
    return os.path.dirname(os.path.realpath(__file__))

def _applicationDirectory() -> str:
    if os.name == 'nt':
        return os.path.join(os.getenv('APPDATA'), app.AppName)
    else:
        return os.path.join(pathlib.Path.home(), '.' + app.AppName.lower().replace(' ', ''))

def _parseRolls(string: str) -> typing.List[typing.Union[int, float]]:
    rolls = []
    for token in string.replace(',', ' ').split():
        try:
            rolls.append(int(token))
        except ValueError:
            rolls.append(float(token))
    return rolls

def _loadSettlements(path: str) -> typing.List[oldworld.Settlement]:
    with open(path, 'r', encoding='UTF8') as file:
        data = json.load(file)
    if isinstance(data, dict):
        data = data.get('settlements', [data])
    if not isinstance(data, list):
        raise RuntimeError(f'Settlement file "{path}" doesn\'t contain a list of settlements')
    return [oldworld.Settlement.fromData(entry) for entry in data]

def _findSettlement(
        settlements: typing.Iterable[oldworld.Settlement],
        name: typing.Optional[str]
        ) -> oldworld.Settlement:
    settlements = list(settlements)
    if not settlements:
        raise oldworld.NotFoundException('No settlements were loaded')
    if not name:
        return settlements[0]
    for settlement in settlements:
        if settlement.name().lower() == name.lower():
            return settlement
    raise oldworld.NotFoundException(f'Unknown settlement "{name}"')

def _createDiceRoller(
        seed: typing.Optional[int],
        rolls: typing.Optional[str]
        ) -> common.DiceRoller:
    randomGenerator = common.RandomGenerator(seed=seed)
    if rolls:
        # Rolls the GM made with physical dice are used first
        return common.DiceRoller(randomGenerator=common.ScriptedRandomGenerator(
            values=_parseRolls(rolls),
            fallback=randomGenerator))
    return common.DiceRoller(randomGenerator=randomGenerator)

def _printAudit(calculation: common.ScalarCalculation) -> None:
    print('Audit:')
    for subCalculation in calculation.namedHierarchy() + [calculation]:
        if not subCalculation.name():
            continue
        print('  {name} = {working} = {value}'.format(
            name=subCalculation.name(),
            working=subCalculation.calculationString(outerBrackets=False),
            value=common.formatNumber(subCalculation.value())))

def _printPriceBreakdown(breakdown: logic.PriceBreakdown) -> None:
    print('  Base price: {price} GC per {block} EP ({quality})'.format(
        price=common.formatNumber(breakdown.basePricePerUnit()),
        block=oldworld.UnitBlockSize,
        quality=breakdown.quality()))
    for modifier in breakdown.modifiers():
        print('  {description}: {amount} GC'.format(
            description=modifier.description(),
            amount=common.formatNumber(modifier.amount(), alwaysIncludeSign=True)))
    print('  Final price: {price} GC per {block} EP'.format(
        price=common.formatNumber(breakdown.finalPricePerUnit()),
        block=oldworld.UnitBlockSize))
    print('  Total for {quantity} EP: {total}'.format(
        quantity=breakdown.quantity(),
        total=oldworld.formatCurrency(breakdown.totalPennies())))

def _printPurchase(result: logic.PurchaseResult, audit: bool) -> None:
    availability = result.availability()
    print(f'{result.settlementName()} ({result.season().name})')
    print('Availability: {state} (chance {chance}%)'.format(
        state=availability.state().value,
        chance=availability.chance().value()))

    selection = result.cargoSelection()
    if selection:
        print(f'Cargo: {selection.cargoName()} ({selection.method().value})')
    cargoSize = result.cargoSize()
    if cargoSize:
        print(f'Cargo size: {cargoSize.totalSize().value()} EP, {result.availableQuantity()} EP available')
    qualityRoll = result.qualityRoll()
    if qualityRoll and qualityRoll.isRolled():
        print(f'Quality: {qualityRoll.grade().value} (score {qualityRoll.score().value()}, priced as {qualityRoll.tier()})')
    haggleTest = result.haggleTest()
    if haggleTest:
        print(f'Haggle: {haggleTest.description()}')
    breakdown = result.priceBreakdown()
    if breakdown:
        print('Price:')
        _printPriceBreakdown(breakdown=breakdown)
        if audit:
            _printAudit(calculation=breakdown.calculation())
    for note in result.notes():
        print(f'Note: {note}')

    print('Rolls:')
    for roll in result.rolls():
        print(f'  {roll.name()}: {common.formatNumber(roll.result().value())}')

def _printSale(result: logic.SaleResult, audit: bool) -> None:
    print(f'{result.settlementName()} ({result.season().name})')
    eligibility = result.eligibility()
    if not eligibility.canSell():
        print(f'Can\'t sell: {eligibility.reason()}')
        return

    buyerCheck = result.buyerCheck()
    if buyerCheck:
        print('Buyer: {state} (chance {chance}%)'.format(
            state=buyerCheck.state().value,
            chance=buyerCheck.chance().value()))
    partialBuyerCheck = result.partialBuyerCheck()
    if partialBuyerCheck:
        print(f'Buyer for half the cargo: {partialBuyerCheck.state().value}')
    villageDemand = result.villageDemand()
    if villageDemand is not None:
        print(f'Village demand: {villageDemand.value()} EP')
    saleType = result.saleType()
    if saleType:
        print(f'Sold {result.quantitySold()} of {result.quantityOffered()} EP of {result.cargoName()} ({saleType.value})')
    haggleTest = result.haggleTest()
    if haggleTest:
        print(f'Haggle: {haggleTest.description()}')
    breakdown = result.priceBreakdown()
    if breakdown:
        print('Offer:')
        _printPriceBreakdown(breakdown=breakdown)
        if audit:
            _printAudit(calculation=breakdown.calculation())
    for note in result.notes():
        print(f'Note: {note}')

    print('Rolls:')
    for roll in result.rolls():
        print(f'  {roll.name()}: {common.formatNumber(roll.result().value())}')

def _printMerchants(merchants: typing.Iterable[logic.Merchant]) -> None:
    for merchant in merchants:
        breakdown = merchant.priceBreakdown()
        print('{id}: {personality} {role}, skill {skill}, {quantity} EP of {cargo}, {state}{price}'.format(
            id=merchant.id(),
            personality=merchant.personality().name(),
            role=merchant.role().value,
            skill=merchant.skill(),
            quantity=merchant.quantity(),
            cargo=merchant.cargoName(),
            state=merchant.availability().state().value,
            price=f', {common.formatNumber(breakdown.finalPricePerUnit())} GC per {oldworld.UnitBlockSize} EP' if breakdown else ''))

def main(args: typing.Optional[typing.Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=app.AppDescription)
    parser.add_argument('--settlement-file', required=True, help='JSON file of settlements')
    parser.add_argument('--settlement', help='Name of the settlement to trade at (defaults to the first in the file)')
    parser.add_argument('--season', help='Season to trade in (defaults to the configured season)')
    parser.add_argument('--cargo', help='Cargo to sell, or to buy rather than rolling for it')
    parser.add_argument('--quantity', type=int, help='Quantity to buy in EP (defaults to all available)')
    parser.add_argument('--quality', help='Quality tier for graded cargo')
    parser.add_argument('--player-skill', type=int, help='Roll a haggle test with this player skill')
    parser.add_argument('--dealmaker', action='store_true', help='The player has the Dealmaker talent')
    parser.add_argument('--desperate', action='store_true', help='Attempt a desperation roll if nothing is available')
    parser.add_argument('--seed', type=int, help='Seed for reproducible rolls')
    parser.add_argument('--rolls', help='Comma separated rolls made with physical dice, used before any random rolls')
    parser.add_argument('--merchants', action='store_true', help='Generate all merchants for the settlement')
    parser.add_argument('--sell', action='store_true', help='Sell --quantity EP of --cargo rather than buying')
    parser.add_argument('--bought-at', help='Settlement the cargo being sold was bought at')
    parser.add_argument('--days-held', type=int, help='Days since the cargo being sold was bought')
    parser.add_argument('--partial-sale', action='store_true', help='Offer half the cargo if no buyer is found')
    parser.add_argument('--rumour', help='Source of a rumour that the cargo being sold is wanted here')
    parser.add_argument('--audit', action='store_true', help='Print how each part of the price was calculated')
    parser.add_argument('--output', help='Write the result as JSON to this file')
    parser.add_argument('--app-dir', help='Directory for config and log files')
    args = parser.parse_args(args)
    if args.sell and (not args.cargo or not args.quantity):
        parser.error('--sell needs --cargo and --quantity')

    appDir = args.app_dir if args.app_dir else _applicationDirectory()
    os.makedirs(appDir, exist_ok=True)

    app.setupLogger(
        logDir=os.path.join(appDir, 'logs'),
        logFile='tradingplaces.log',
        consoleStream=sys.stderr)
    # Log version before setting log level as it should always be logged
    logging.info(f'{app.AppName} v{app.AppVersion}')
    logging.info(f'Python: {sys.version}')

    try:
        app.Config.setDirs(
            installDir=_installDirectory(),
            appDir=appDir)
        config = app.Config.instance()

        # Set configured log level immediately after configuration has been setup
        try:
            app.setLogLevel(config.value(option=app.ConfigOption.LogLevel))
        except Exception as ex:
            logging.warning('Failed to set log level', exc_info=ex)

        settlement = _findSettlement(
            settlements=_loadSettlements(path=args.settlement_file),
            name=args.settlement)
        season = oldworld.Season.fromString(args.season) \
            if args.season else \
            config.value(option=app.ConfigOption.Season)
        # Graded cargo has its quality rolled when no quality is given
        quality = args.quality
        if not quality and not config.value(option=app.ConfigOption.RollQuality):
            quality = config.value(option=app.ConfigOption.DefaultQuality)
        allowDesperation = args.desperate or config.value(option=app.ConfigOption.AllowDesperation)
        diceRoller = _createDiceRoller(seed=args.seed, rolls=args.rolls)
        catalog = oldworld.CargoCatalog.default()

        if args.sell:
            result = logic.attemptSale(
                settlement=settlement,
                season=season,
                catalog=catalog,
                diceRoller=diceRoller,
                cargoName=args.cargo,
                quantity=args.quantity,
                quality=args.quality,
                purchaseSettlementName=args.bought_at,
                daysSincePurchase=args.days_held,
                playerSkill=args.player_skill,
                hasDealmaker=args.dealmaker,
                gmPenalty=config.value(option=app.ConfigOption.HaggleFailurePenalty),
                skillModel=config.value(option=app.ConfigOption.SkillModel),
                allowPartialSale=args.partial_sale,
                desperate=args.desperate,
                rumour=logic.Rumour(
                    settlementName=settlement.name(),
                    cargoName=args.cargo,
                    source=args.rumour) if args.rumour else None)
            _printSale(result=result, audit=args.audit)
            if args.output:
                logic.writeSaleResult(result=result, path=args.output)
        elif args.merchants:
            merchants = logic.generateMerchants(
                settlement=settlement,
                season=season,
                catalog=catalog,
                diceRoller=diceRoller,
                skillModel=config.value(option=app.ConfigOption.SkillModel),
                quality=quality,
                allowDesperation=allowDesperation)
            _printMerchants(merchants=merchants)
            if args.output:
                logic.writeMerchants(merchants=merchants, path=args.output)
        else:
            result = logic.attemptPurchase(
                settlement=settlement,
                season=season,
                catalog=catalog,
                diceRoller=diceRoller,
                quantity=args.quantity,
                quality=quality,
                allowDesperation=allowDesperation,
                playerSkill=args.player_skill,
                hasDealmaker=args.dealmaker,
                gmPenalty=config.value(option=app.ConfigOption.HaggleFailurePenalty),
                skillModel=config.value(option=app.ConfigOption.SkillModel),
                localGoodsChance=config.value(option=app.ConfigOption.LocalGoodsChance),
                cargoName=args.cargo)
            _printPurchase(result=result, audit=args.audit)
            if args.output:
                logic.writePurchaseResult(result=result, path=args.output)
    except Exception as ex:
        logging.critical('Trading failed', exc_info=ex)
        return 1

    return 0

if __name__ == "__main__":
    sys.exit(main())
