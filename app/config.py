import common
import enum
import logging
import logic
import oldworld
import os
import threading
import typing
from PyQt5 import QtCore

class ConfigOption(enum.Enum):
    # Debug
    LogLevel = 100

    # Merchants
    SkillModel = 200
    AllowDesperation = 201
    DefaultQuality = 202
    RollQuality = 203

    # Cargo
    LocalGoodsChance = 300
    Season = 301

    # Haggling
    HaggleFailurePenalty = 400

class ConfigItem(object):
    def __init__(
            self,
            option: ConfigOption,
            restart: bool
            ) -> None:
        self._option = option
        self._restart = restart

    def option(self) -> ConfigOption:
        return self._option

    def value(self, futureValue: bool = False) -> typing.Any:
        raise RuntimeError(f'{type(self)} is derived from ConfigItem so must implement value')

    def setValue(self, value: typing.Any) -> None:
        raise RuntimeError(f'{type(self)} is derived from ConfigItem so must implement setValue')

    def isRestartRequired(self) -> bool:
        raise RuntimeError(f'{type(self)} is derived from ConfigItem so must implement restartRequired')

    def read(self, settings: QtCore.QSettings) -> None:
        raise RuntimeError(f'{type(self)} is derived from ConfigItem so must implement read')

    def write(self, settings: QtCore.QSettings) -> None:
        raise RuntimeError(f'{type(self)} is derived from ConfigItem so must implement write')

    @staticmethod
    def loadConfigSetting(
            settings: QtCore.QSettings,
            key: str,
            default: typing.Any,
            type: type
            ) -> typing.Any:
        try:
            # Explicitly check for key not being present and use default if it's not. This is
            # preferable to relying on value() as it can have some unexpected behaviour (e.g.
            # a default of None when reading a float will return 0.0 rather than None)
            if not settings.contains(key):
                return default

            return settings.value(key, defaultValue=default, type=type)
        except TypeError as ex:
            logging.error(f'Failed to read "{key}" from "{settings.group()}" in "{settings.fileName()}""  (value is not a {type.__name__})')
            return default
        except Exception as ex:
            logging.error(f'Failed to read "{key}" from "{settings.group()}" in "{settings.fileName()}"', exc_info=ex)
            return default

class SimpleConfigItem(ConfigItem):
    def __init__(
            self,
            option: ConfigOption,
            key: str,
            type: typing.Type[object],
            default: typing.Any,
            restart: bool,
            valueToStringCb: typing.Optional[typing.Callable[[typing.Any], str]] = None,
            valueFromStringCb: typing.Optional[typing.Callable[[str], typing.Any]] = None
            ) -> None:
        super().__init__(option=option, restart=restart)
        self._key = key
        self._type = type
        self._default = self._type(default)
        self._currentValue = self._futureValue = self._default
        self._valueToStringCb = valueToStringCb
        self._valueFromStringCb = valueFromStringCb

    def value(self, futureValue: bool = False) -> typing.Any:
        return self._futureValue if futureValue else self._currentValue

    def setValue(self, value: typing.Any) -> None:
        if value == self._futureValue:
            return

        value = self._type(value)
        if self._restart:
            self._futureValue = value
        else:
            self._currentValue = self._futureValue = value

    def isRestartRequired(self) -> bool:
        return self._currentValue != self._futureValue

    def read(self, settings: QtCore.QSettings) -> None:
        if self._valueToStringCb and self._valueFromStringCb:
            value = self._valueFromStringCb(self.loadConfigSetting(
                settings=settings,
                key=self._key,
                default=self._valueToStringCb(self._default),
                type=str))
        else:
            value = self.loadConfigSetting(
                settings=settings,
                key=self._key,
                default=self._default,
                type=self._type)

        self._currentValue = self._futureValue = value

    def write(self, settings: QtCore.QSettings) -> None:
        if self._valueToStringCb and self._valueFromStringCb:
            settings.setValue(self._key, self._valueToStringCb(self._futureValue))
        else:
            settings.setValue(self._key, self._futureValue)

class StringConfigItem(SimpleConfigItem):
    def __init__(
            self,
            option: ConfigOption,
            key: str,
            default: str,
            restart: bool,
            validateCb: typing.Optional[typing.Callable[[str], bool]] = None
            ) -> None:
        super().__init__(
            option=option,
            key=key,
            type=str,
            default=default,
            restart=restart)
        self._validateCb = validateCb

    def setValue(self, value: str) -> None:
        if self._validateCb and not self._validateCb(value):
            value = self._default
        super().setValue(value=value)

    def read(self, settings) -> None:
        super().read(settings=settings)
        if self._validateCb and not self._validateCb(self._currentValue):
            self._currentValue = self._futureValue = self._default

class BoolConfigItem(SimpleConfigItem):
    def __init__(
            self,
            option: ConfigOption,
            key: str,
            restart: bool,
            default: bool
            ) -> None:
        super().__init__(
            option=option,
            key=key,
            type=bool,
            default=default,
            restart=restart)

class IntConfigItem(SimpleConfigItem):
    def __init__(
            self,
            option: ConfigOption,
            key: str,
            restart: bool,
            default: int,
            min: typing.Optional[int] = None,
            max: typing.Optional[int] = None
            ) -> None:
        super().__init__(
            option=option,
            key=key,
            type=int,
            default=default,
            restart=restart)
        self._min = int(min) if min is not None else None
        self._max = int(max) if max is not None else None
        if self._min is not None and self._max is not None:
            self._min, self._max = common.minmax(self._min, self._max)

    def setValue(self, value: int) -> None:
        return super().setValue(value=self._clamp(value=value))

    def read(self, settings) -> None:
        super().read(settings=settings)
        self._currentValue = self._futureValue = self._clamp(self._currentValue)

    def _clamp(self, value: int) -> int:
        oldValue = value
        if self._min is not None and value < self._min:
            value = self._min
        if self._max is not None and value > self._max:
            value = self._max

        if value != oldValue:
            logging.warning(f'Clamped config option {self._key} to range {self._min} - {self._max}')

        return value

class EnumConfigItem(SimpleConfigItem):
    def __init__(
            self,
            option: ConfigOption,
            key: str,
            restart: bool,
            enumType: typing.Type[enum.Enum],
            default: enum.Enum
            ) -> None:
        super().__init__(
            option=option,
            key=key,
            type=enumType,
            default=default,
            restart=restart,
            valueToStringCb=lambda e: e.name,
            valueFromStringCb=lambda s: enumType.__members__[s] if s in enumType.__members__ else default)

class MappedConfigItem(SimpleConfigItem):
    def __init__(
            self,
            option: ConfigOption,
            key: str,
            restart: bool,
            keyType: typing.Type[typing.Any],
            default: typing.Any,
            toStringMap: typing.Mapping[typing.Any, str],
            fromStringMap: typing.Mapping[str, typing.Any]
            ) -> None:
        super().__init__(
            option=option,
            key=key,
            type=keyType,
            default=default,
            restart=restart,
            valueToStringCb=lambda o: toStringMap[o],
            valueFromStringCb=lambda s: fromStringMap.get(s, default))
        self._toStringMap = dict(toStringMap)
        self._fromStringMap = dict(fromStringMap)

    def setValue(self, value: typing.Any) -> None:
        if value not in self._toStringMap:
            value = self._default
        super().setValue(value=value)

class QualityConfigItem(StringConfigItem):
    def __init__(
            self,
            option: ConfigOption,
            key: str,
            restart: bool,
            default: str
            ) -> None:
        super().__init__(
            option=option,
            key=key,
            default=default,
            restart=restart,
            validateCb=self._validate)

    def _validate(self, value: str) -> bool:
        if not isinstance(value, str) or value.lower() not in _KnownQualityTiers:
            logging.warning(f'Ignoring config option {self._key} as quality "{value}" is unknown')
            return False
        return True

def _knownQualityTiers() -> typing.Set[str]:
    tiers = {oldworld.AverageQualityTier}
    for cargoType in oldworld.CargoCatalog.default().listAll():
        tiers.update(cargoType.qualityTiers().keys())
    return tiers

_KnownQualityTiers = _knownQualityTiers()

class Config(QtCore.QObject):
    configChanged = QtCore.pyqtSignal(
        ConfigOption, # Config option that has changed
        object, # Old value
        object) # New value

    _ConfigFileName = 'tradingplaces.ini'

    _instance = None # Singleton instance
    _lock = threading.Lock()
    _appDir = '.'
    _installDir = '.'
    _configItems: typing.Dict[ConfigOption, ConfigItem] = {}

    @classmethod
    def instance(cls):
        if not cls._instance:
            with cls._lock:
                # Recheck instance as another thread could have created it between the
                # first check and the lock
                if not cls._instance:
                    cls._instance = cls.__new__(cls)
                    QtCore.QObject.__init__(cls._instance)
                    cls._instance._settings = None
                    cls._instance.load()
        return cls._instance

    @staticmethod
    def setDirs(
            installDir: str,
            appDir: str
            ) -> None:
        if Config._instance:
            raise RuntimeError('You can\'t set the app directories after the singleton has been initialised')
        Config._installDir = installDir
        Config._appDir = appDir

    @staticmethod
    def installDir() -> str:
        return Config._installDir

    @staticmethod
    def appDir() -> str:
        return Config._appDir

    def load(self) -> None:
        if not self._settings:
            filePath = os.path.join(self._appDir, self._ConfigFileName)
            self._settings = QtCore.QSettings(filePath, QtCore.QSettings.Format.IniFormat)

        self._configItems.clear()

        self._addConfigItem(MappedConfigItem(
            option=ConfigOption.LogLevel,
            key='Debug/LogLevel',
            restart=True,
            keyType=int,
            default=logging.WARNING,
            toStringMap={
                logging.CRITICAL: 'critical',
                logging.ERROR: 'error',
                logging.WARNING: 'warning',
                logging.INFO: 'information',
                logging.DEBUG: 'debug'},
            fromStringMap={
                'critical': logging.CRITICAL,
                'crit': logging.CRITICAL,
                'error': logging.ERROR,
                'err': logging.ERROR,
                'warning': logging.WARNING,
                'warn': logging.WARNING,
                'information': logging.INFO,
                'info': logging.INFO,
                'debug': logging.DEBUG,
                'dbg': logging.DEBUG}))

        self._addConfigItem(EnumConfigItem(
            option=ConfigOption.SkillModel,
            key='Merchants/SkillModel',
            restart=False,
            enumType=logic.SkillModel,
            default=logic.SkillModel.Percentile))
        self._addConfigItem(BoolConfigItem(
            option=ConfigOption.AllowDesperation,
            key='Merchants/AllowDesperation',
            restart=False,
            default=False))
        self._addConfigItem(QualityConfigItem(
            option=ConfigOption.DefaultQuality,
            key='Merchants/DefaultQuality',
            restart=False,
            default=oldworld.AverageQualityTier))
        self._addConfigItem(BoolConfigItem(
            option=ConfigOption.RollQuality,
            key='Merchants/RollQuality',
            restart=False,
            default=True))

        self._addConfigItem(IntConfigItem(
            option=ConfigOption.LocalGoodsChance,
            key='Cargo/LocalGoodsChance',
            restart=False,
            default=0,
            min=0,
            max=100))
        self._addConfigItem(EnumConfigItem(
            option=ConfigOption.Season,
            key='Cargo/Season',
            restart=False,
            enumType=oldworld.Season,
            default=oldworld.Season.Spring))

        self._addConfigItem(BoolConfigItem(
            option=ConfigOption.HaggleFailurePenalty,
            key='Haggling/FailurePenalty',
            restart=False,
            default=False))

    @typing.overload
    def value(self, option: typing.Literal[ConfigOption.LogLevel], futureValue: bool = False) -> int: ...
    @typing.overload
    def value(self, option: typing.Literal[ConfigOption.SkillModel], futureValue: bool = False) -> logic.SkillModel: ...
    @typing.overload
    def value(self, option: typing.Literal[ConfigOption.AllowDesperation], futureValue: bool = False) -> bool: ...
    @typing.overload
    def value(self, option: typing.Literal[ConfigOption.DefaultQuality], futureValue: bool = False) -> str: ...
    @typing.overload
    def value(self, option: typing.Literal[ConfigOption.RollQuality], futureValue: bool = False) -> bool: ...
    @typing.overload
    def value(self, option: typing.Literal[ConfigOption.LocalGoodsChance], futureValue: bool = False) -> int: ...
    @typing.overload
    def value(self, option: typing.Literal[ConfigOption.Season], futureValue: bool = False) -> oldworld.Season: ...
    @typing.overload
    def value(self, option: typing.Literal[ConfigOption.HaggleFailurePenalty], futureValue: bool = False) -> bool: ...

    def value(
            self,
            option: ConfigOption,
            futureValue: bool = False
            ) -> typing.Any:
        item = self._configItems[option]
        return item.value(futureValue=futureValue)

    def setValue(
            self,
            option: ConfigOption,
            value: typing.Any
            ) -> bool:
        item = self._configItems[option]

        oldValue = item.value()
        item.setValue(value=value)
        newValue = item.value()

        # Do a write even if the value "hasn't changed" as the change
        # comparison is based on the current value but it's the future
        # value that will be written
        item.write(self._settings)

        if newValue == oldValue:
            return False

        self.configChanged.emit(option, oldValue, newValue)
        return True

    def sync(self) -> None:
        self._settings.sync()

    def isRestartRequired(self) -> bool:
        for item in self._configItems.values():
            if item.isRestartRequired():
                return True
        return False

    def _addConfigItem(self, item: ConfigItem) -> None:
        Config._configItems[item.option()] = item
        try:
            item.read(settings=self._settings)
        except Exception as ex:
            logging.warning(f'Failed to read config option {item.option().name}', exc_info=ex)
