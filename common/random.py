import collections
import numpy
import random
import secrets
import typing

class RandomGenerator(object):
    def __init__(
            self,
            seed: typing.Optional[int] = None,
            legacy: bool = False
            ) -> None:
        super().__init__()
        self.init(seed=seed, legacy=legacy)

    def init(
            self,
            seed: typing.Optional[int] = None,
            legacy: bool = False
            ) -> None:
        self._seed = seed if seed != None else RandomGenerator._randomSeed()
        self._legacy = legacy

        if self._legacy:
            self._rng = random.Random(self._seed)
        else:
            # Use PCG64 rather than the default MT19937 (Mersenne Twister) as it provides
            # better initial diffusion (i.e. more random when first used)
            self._rng = numpy.random.RandomState(numpy.random.PCG64(numpy.random.SeedSequence(self._seed)))

    def random(self) -> float:
        return float(self._rng.random())

    def randint(self, low: int, high: int) -> int:
        if self._legacy:
            return self._rng.randint(low, high)
        else:
            # NOTE: High value is +1 to make interface compatible with the standard
            # python random.randint as Numpy has high as exclusive where as the
            # default python implementation has it as inclusive
            return int(self._rng.randint(low, high + 1))

    # NOTE: This is different to the api for the standard python random where
    # seed sets the new seed rather than retrieving the current seed as it
    # does here
    def seed(self) -> int:
        return self._seed

    # Generate a true random 128 bit seed to init the pseudo random number
    # generator
    @staticmethod
    def _randomSeed() -> int:
        return secrets.randbits(128)

# Generator that returns a fixed sequence of values. This is used when the GM
# rolls physical dice and enters the results, and by tests that need exact
# rolls. Integer values are consumed by randint and float values by random.
# Once the script runs out, values come from the fallback generator if one was
# supplied, otherwise it's an error.
class ScriptedRandomGenerator(object):
    def __init__(
            self,
            values: typing.Iterable[typing.Union[int, float]],
            fallback: typing.Optional[typing.Union[random.Random, RandomGenerator]] = None
            ) -> None:
        super().__init__()
        self._values = collections.deque(values)
        self._fallback = fallback

    def random(self) -> float:
        if not self._values:
            return self._fallbackGenerator().random()

        value = self._values.popleft()
        if not isinstance(value, float) or value < 0 or value >= 1:
            raise ValueError(f'Scripted value {value} is not a float in the range [0, 1)')
        return value

    def randint(self, low: int, high: int) -> int:
        if not self._values:
            return self._fallbackGenerator().randint(low, high)

        value = self._values.popleft()
        if not isinstance(value, int) or value < low or value > high:
            raise ValueError(f'Scripted value {value} is not an integer in the range {low} to {high}')
        return value

    def remaining(self) -> int:
        return len(self._values)

    # NOTE: The annotation is a string as random is the method above when the
    # class body is evaluated, not the module
    def _fallbackGenerator(self) -> 'typing.Union[random.Random, RandomGenerator]':
        if self._fallback == None:
            raise RuntimeError('Scripted random generator has run out of values')
        return self._fallback
