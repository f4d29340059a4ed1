import common
import logging
import logic
import typing

class Merchant(object):
    def __init__(
            self,
            id: str,
            role: logic.MerchantRole,
            cargoName: str,
            skill: common.ScalarCalculation,
            skillModel: logic.SkillModel,
            personality: logic.Personality,
            quantity: common.ScalarCalculation,
            availability: logic.AvailabilityCheck,
            equilibrium: logic.Equilibrium,
            priceBreakdown: typing.Optional[logic.PriceBreakdown] = None
            ) -> None:
        self._id = id
        self._role = role
        self._cargoName = cargoName
        self._skill = skill
        self._skillModel = skillModel
        self._personality = personality
        self._quantity = quantity
        self._availability = availability
        self._equilibrium = equilibrium
        self._priceBreakdown = priceBreakdown
        self._desperationApplied = False

    def id(self) -> str:
        return self._id

    def role(self) -> logic.MerchantRole:
        return self._role

    def cargoName(self) -> str:
        return self._cargoName

    def skill(self) -> int:
        return self._skill.value()

    def skillCalculation(self) -> common.ScalarCalculation:
        return self._skill

    def skillModel(self) -> logic.SkillModel:
        return self._skillModel

    def personality(self) -> logic.Personality:
        return self._personality

    def quantity(self) -> int:
        return self._quantity.value()

    def quantityCalculation(self) -> common.ScalarCalculation:
        return self._quantity

    def availability(self) -> logic.AvailabilityCheck:
        return self._availability

    def isAvailable(self) -> bool:
        return self._availability.available()

    def equilibrium(self) -> logic.Equilibrium:
        return self._equilibrium

    def priceBreakdown(self) -> typing.Optional[logic.PriceBreakdown]:
        return self._priceBreakdown

    def desperationApplied(self) -> bool:
        return self._desperationApplied

    # Returns True if the penalties were applied by this call. Calling it a
    # second time does nothing so the penalties never compound.
    def applyDesperationPenalties(self) -> bool:
        if self._desperationApplied:
            return False
        self._desperationApplied = True

        self._skill = logic.clampSkill(
            skill=logic.applyDesperationSkill(skill=self._skill),
            model=self._skillModel,
            name='Merchant Skill')
        self._quantity = logic.applyDesperationQuantity(quantity=self._quantity)

        if self._priceBreakdown:
            breakdown = self._priceBreakdown.withQuantity(quantity=self._quantity)
            self._priceBreakdown = logic.applyPriceModifier(
                breakdown=breakdown,
                type=logic.PriceModifierType.Desperation,
                percentage=logic.DesperationPenalties.PricePercentage,
                description='Desperation penalty (+15%)')

        logging.debug(
            f'Applied desperation penalties to merchant {self._id}, skill {self.skill()} quantity {self.quantity()}')
        return True

    def __str__(self) -> str:
        return f'{self._personality.name()} ({self._role.value}) dealing in {self._cargoName}'

def merchantId(
        settlementName: str,
        cargoName: str,
        role: logic.MerchantRole,
        index: int
        ) -> str:
    return '{settlement}-{cargo}-{role}-{index}'.format(
        settlement=common.slugify(settlementName),
        cargo=common.slugify(cargoName),
        role=role.value,
        index=index + 1)
