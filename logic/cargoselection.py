import common
import enum
import logging
import oldworld
import typing

"""
Which cargo a trade opportunity concerns depends on what the settlement
produces
- No Trade tag: the settlement only has its own goods. The first production
  tag is used. If the tag isn't a known cargo it's still used as is, some
  settlement data has free text production entries.
- Only the Trade tag: the cargo comes from a d100 roll on the seasonal table.
- Trade plus other tags: the options are each of the other tags plus a random
  trade good. With the local goods chance at 0 (the default) the random trade
  good is always used. Otherwise a d100 at or under the chance picks one of the
  local goods (all equally likely) and anything over it rolls on the seasonal
  table.
"""

RandomTradeGoodOption = 'Random Trade Good'

# NOTE: The values are written to the audit log so shouldn't be changed
class CargoSelectionMethod(enum.Enum):
    SpecificGoodsOnly = 'specific_goods_only'
    PureTradeCenter = 'pure_trade_center'
    TradeCenterWithGoods = 'trade_center_with_goods'

class CargoSelection(object):
    def __init__(
            self,
            cargoName: str,
            method: CargoSelectionMethod,
            options: typing.Iterable[str],
            roll: typing.Optional[common.ScalarCalculation] = None,
            isKnownCargo: bool = True
            ) -> None:
        self._cargoName = cargoName
        self._method = method
        self._options = list(options)
        self._roll = roll
        self._isKnownCargo = isKnownCargo

    def cargoName(self) -> str:
        return self._cargoName

    def method(self) -> CargoSelectionMethod:
        return self._method

    def options(self) -> typing.List[str]:
        return list(self._options)

    # The seasonal table roll, None if the table wasn't used
    def roll(self) -> typing.Optional[common.ScalarCalculation]:
        return self._roll

    # False when a free text production tag was used as the cargo
    def isKnownCargo(self) -> bool:
        return self._isKnownCargo

def rollSeasonalCargo(
        table: oldworld.SeasonalCargoTable,
        season: oldworld.Season,
        diceRoller: common.DiceRoller
        ) -> typing.Tuple[str, common.ScalarCalculation]:
    season = oldworld.validateSeason(season)
    roll = diceRoller.makePercentileRoll(name=f'{season.name} Cargo Table Roll')
    cargoName = table.lookup(season=season, roll=roll.value())
    logging.debug(f'Seasonal cargo roll of {roll.value()} in {season.value} gave {cargoName}')
    return (cargoName, roll)

def selectCargoType(
        settlement: oldworld.Settlement,
        season: oldworld.Season,
        diceRoller: common.DiceRoller,
        catalog: typing.Optional[oldworld.CargoCatalog] = None,
        seasonalTable: typing.Optional[oldworld.SeasonalCargoTable] = None,
        localGoodsChance: int = 0 # Percentage chance of a trade centre offering one of its own goods
        ) -> CargoSelection:
    season = oldworld.validateSeason(season)
    common.validateMandatoryInt(
        name='Local goods chance',
        value=localGoodsChance,
        min=0,
        max=100,
        errorType=oldworld.InvalidArgumentException)
    if catalog is None:
        catalog = oldworld.CargoCatalog.default()
    if seasonalTable is None:
        seasonalTable = oldworld.SeasonalCargoTable.default()

    specificGoods = settlement.specificGoodsTags()

    if not settlement.isTradeCenter():
        if not specificGoods:
            raise oldworld.ConfigurationMissingException(
                f'Settlement "{settlement.name()}" has no production tags')
        cargoName = specificGoods[0]
        isKnownCargo = catalog.contains(cargoName)
        if not isKnownCargo:
            logging.warning(
                f'Production tag "{cargoName}" for {settlement.name()} is not a known cargo type, using it as is')
        return CargoSelection(
            cargoName=cargoName,
            method=CargoSelectionMethod.SpecificGoodsOnly,
            options=specificGoods,
            isKnownCargo=isKnownCargo)

    if not specificGoods:
        cargoName, roll = rollSeasonalCargo(
            table=seasonalTable,
            season=season,
            diceRoller=diceRoller)
        return CargoSelection(
            cargoName=cargoName,
            method=CargoSelectionMethod.PureTradeCenter,
            options=[RandomTradeGoodOption],
            roll=roll,
            isKnownCargo=catalog.contains(cargoName))

    options = specificGoods + [RandomTradeGoodOption]
    if localGoodsChance > 0:
        localRoll = diceRoller.makePercentileRoll(name='Local Goods Roll')
        if localRoll.value() <= localGoodsChance:
            index = diceRoller.makeIndexRoll(
                count=len(specificGoods),
                name='Local Goods Choice Roll').value()
            cargoName = specificGoods[index]
            logging.debug(f'{settlement.name()} is offering local goods {cargoName}')
            return CargoSelection(
                cargoName=cargoName,
                method=CargoSelectionMethod.TradeCenterWithGoods,
                options=options,
                isKnownCargo=catalog.contains(cargoName))

    cargoName, roll = rollSeasonalCargo(
        table=seasonalTable,
        season=season,
        diceRoller=diceRoller)
    return CargoSelection(
        cargoName=cargoName,
        method=CargoSelectionMethod.TradeCenterWithGoods,
        options=options,
        roll=roll,
        isKnownCargo=catalog.contains(cargoName))
