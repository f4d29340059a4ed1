import common
import oldworld
import typing

# Prices are in gold crowns per 10 EP (the unit block) and vary by season.
# Cargo that needs grading (wine, luxuries etc) has a quality tier table that
# scales the seasonal price. Cargo without a tier table is always average.

UnitBlockSize = 10
AverageQualityTier = 'average'

class CargoType(object):
    def __init__(
            self,
            name: str,
            category: str,
            basePrices: typing.Mapping[oldworld.Season, typing.Union[int, float]],
            encumbrancePerUnit: typing.Union[int, float] = 1,
            qualityTiers: typing.Optional[typing.Mapping[str, float]] = None
            ) -> None:
        self._name = common.validateMandatoryStr(
            name='Cargo name',
            value=name,
            allowEmpty=False,
            errorType=oldworld.InvalidArgumentException)
        self._category = category

        missing = [season.value for season in oldworld.Season if season not in basePrices]
        if missing:
            raise oldworld.InvalidArgumentException(
                f'Cargo "{name}" is missing base prices for {common.humanFriendlyListString(missing)}')

        self._basePrices: typing.Dict[oldworld.Season, common.ScalarCalculation] = {}
        for season in oldworld.Season:
            price = common.validateMandatoryFloat(
                name=f'{name} {season.value} price',
                value=basePrices[season],
                min=0,
                errorType=oldworld.InvalidArgumentException)
            self._basePrices[season] = common.ScalarCalculation(
                value=price,
                name=f'{name} {season.name} Base Price')

        self._encumbrancePerUnit = encumbrancePerUnit

        self._qualityTiers: typing.Dict[str, common.ScalarCalculation] = {}
        if qualityTiers:
            for tier, multiplier in qualityTiers.items():
                self._qualityTiers[tier.lower()] = common.ScalarCalculation(
                    value=common.validateMandatoryFloat(
                        name=f'{name} {tier} quality multiplier',
                        value=multiplier,
                        min=0,
                        errorType=oldworld.InvalidArgumentException),
                    name=f'{tier.capitalize()} Quality Multiplier')

    def name(self) -> str:
        return self._name

    def category(self) -> str:
        return self._category

    def seasonalPrice(self, season: oldworld.Season) -> common.ScalarCalculation:
        return self._basePrices[oldworld.validateSeason(season)]

    def averagePrice(self) -> float:
        return sum(price.value() for price in self._basePrices.values()) / len(self._basePrices)

    def encumbrancePerUnit(self) -> typing.Union[int, float]:
        return self._encumbrancePerUnit

    def hasQualityTiers(self) -> bool:
        return len(self._qualityTiers) > 0

    def qualityTiers(self) -> typing.Mapping[str, float]:
        return {tier: multiplier.value() for tier, multiplier in self._qualityTiers.items()}

    def qualityMultiplier(self, tier: typing.Optional[str] = None) -> common.ScalarCalculation:
        if not tier:
            tier = AverageQualityTier
        tier = tier.lower()

        if not self._qualityTiers:
            # Ungraded cargo only comes in the one quality
            if tier == AverageQualityTier:
                return _UngradedQualityMultiplier
            raise oldworld.NotFoundException(f'Cargo "{self._name}" has no quality tier "{tier}"')

        multiplier = self._qualityTiers.get(tier)
        if multiplier is None:
            raise oldworld.NotFoundException(f'Cargo "{self._name}" has no quality tier "{tier}"')
        return multiplier

    @staticmethod
    def fromData(data: typing.Mapping[str, typing.Any]) -> 'CargoType':
        missing = [key for key in ('name', 'category', 'basePrices') if data.get(key) is None]
        if missing:
            raise oldworld.ConfigurationMissingException(
                f'Cargo type is missing required fields {common.humanFriendlyListString(missing)}')

        basePrices = {}
        for key, value in data['basePrices'].items():
            basePrices[oldworld.Season.fromString(key)] = value

        return CargoType(
            name=data['name'],
            category=data['category'],
            basePrices=basePrices,
            encumbrancePerUnit=data.get('encumbrancePerUnit', 1),
            qualityTiers=data.get('qualityTiers'))

_UngradedQualityMultiplier = common.ScalarCalculation(
    value=1.0,
    name='Average Quality Multiplier')

class CargoCatalog(object):
    def __init__(
            self,
            cargoTypes: typing.Iterable[CargoType]
            ) -> None:
        self._cargoTypes: typing.Dict[str, CargoType] = {}
        for cargoType in cargoTypes:
            key = cargoType.name().lower()
            if key in self._cargoTypes:
                raise oldworld.InvalidArgumentException(
                    f'Cargo catalog contains duplicate cargo "{cargoType.name()}"')
            self._cargoTypes[key] = cargoType

    def get(self, name: str) -> CargoType:
        cargoType = self._cargoTypes.get(name.lower()) if name else None
        if cargoType is None:
            raise oldworld.NotFoundException(f'Unknown cargo type "{name}"')
        return cargoType

    def contains(self, name: str) -> bool:
        return bool(name) and name.lower() in self._cargoTypes

    def listAll(self) -> typing.List[CargoType]:
        return list(self._cargoTypes.values())

    def __len__(self) -> int:
        return len(self._cargoTypes)

    @staticmethod
    def default() -> 'CargoCatalog':
        return CargoCatalog(cargoTypes=_DefaultCargoTypes)

_StandardQualityTiers = {
    'poor': 0.5,
    'average': 1.0,
    'good': 1.5,
    'excellent': 2.0
}

_DefaultCargoTypes = [
    CargoType(
        name='Grain',
        category='Agriculture',
        basePrices={
            oldworld.Season.Spring: 2,
            oldworld.Season.Summer: 3,
            oldworld.Season.Autumn: 1,
            oldworld.Season.Winter: 4},
        encumbrancePerUnit=1),
    CargoType(
        name='Wool',
        category='Agriculture',
        basePrices={
            oldworld.Season.Spring: 1,
            oldworld.Season.Summer: 2,
            oldworld.Season.Autumn: 2,
            oldworld.Season.Winter: 3},
        encumbrancePerUnit=1),
    CargoType(
        name='Timber',
        category='Raw Materials',
        basePrices={
            oldworld.Season.Spring: 3,
            oldworld.Season.Summer: 3,
            oldworld.Season.Autumn: 4,
            oldworld.Season.Winter: 5},
        encumbrancePerUnit=2),
    CargoType(
        name='Metal',
        category='Raw Materials',
        basePrices={
            oldworld.Season.Spring: 8,
            oldworld.Season.Summer: 8,
            oldworld.Season.Autumn: 9,
            oldworld.Season.Winter: 10},
        encumbrancePerUnit=2),
    CargoType(
        name='Armaments',
        category='Armaments',
        basePrices={
            oldworld.Season.Spring: 12,
            oldworld.Season.Summer: 12,
            oldworld.Season.Autumn: 14,
            oldworld.Season.Winter: 16},
        encumbrancePerUnit=2),
    CargoType(
        name='Wine/Brandy',
        category='Luxury',
        basePrices={
            oldworld.Season.Spring: 15,
            oldworld.Season.Summer: 12,
            oldworld.Season.Autumn: 18,
            oldworld.Season.Winter: 20},
        encumbrancePerUnit=1,
        qualityTiers=_StandardQualityTiers),
    CargoType(
        name='Luxuries',
        category='Luxury',
        basePrices={
            oldworld.Season.Spring: 50,
            oldworld.Season.Summer: 50,
            oldworld.Season.Autumn: 55,
            oldworld.Season.Winter: 60},
        encumbrancePerUnit=1,
        qualityTiers=_StandardQualityTiers)
]
