"""Domestic / business household classification."""

from __future__ import annotations

from typing import Iterable

from crichow.common.constants import CLASSIFIER_POLICIES
from crichow.common.errors import ConfigError
from crichow.common.models import HouseholdCategory

POLICY_NAME_LIST = "name_list"
POLICY_GROUP_LIST = "group_list"


class HouseholdClassifier:
    """Classify collection points with exactly one policy.

    ``name_list`` marks a household as business when its trimmed name is one of
    ``business_households``. ``group_list`` marks every household of a group in
    ``mixed_groups`` as business. Anything else is domestic.
    """

    def __init__(
        self,
        policy: str,
        *,
        business_households: Iterable[str] = (),
        mixed_groups: Iterable[str] = (),
    ) -> None:
        if policy not in CLASSIFIER_POLICIES:
            raise ConfigError(f"Unknown classifier policy: {policy}")
        self.policy = policy
        self.business_households = frozenset(name.strip() for name in business_households)
        self.mixed_groups = frozenset(group.strip() for group in mixed_groups)

    @classmethod
    def from_config(cls, dataset_config: dict) -> "HouseholdClassifier":
        classifier_cfg = dataset_config["classifier"]
        return cls(
            classifier_cfg["policy"],
            business_households=classifier_cfg.get("business_households", []),
            mixed_groups=classifier_cfg.get("mixed_groups", []),
        )

    def classify(self, group_key: str, household_name: str) -> HouseholdCategory:
        if self.policy == POLICY_NAME_LIST:
            is_business = (household_name or "").strip() in self.business_households
        else:
            is_business = (group_key or "").strip() in self.mixed_groups
        return HouseholdCategory.BUSINESS if is_business else HouseholdCategory.DOMESTIC

    def is_business(self, group_key: str, household_name: str) -> bool:
        return self.classify(group_key, household_name) is HouseholdCategory.BUSINESS
