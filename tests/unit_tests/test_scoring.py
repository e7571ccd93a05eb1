"""Unit tests for the role-keyed score policy table."""

import pytest

from medride_api.errors import ValidationError
from medride_api.transport import scoring
from medride_api.transport.enums import ParticipantRole


class TestCreditScore:
    """Tests for scoring.credit_score."""

    @pytest.mark.parametrize(
        "role, points, expected",
        [
            ("community", 0, 300),
            ("community", 100, 500),
            ("rider", 100, 500),
            ("chv", 100, 560),
            ("health_worker", 100, 630),
            ("caregiver", 18, 336),
        ],
    )
    def test_base_plus_points_times_multiplier(self, role, points, expected):
        assert scoring.credit_score(role, points) == expected

    def test_capped_at_850(self):
        for role in ParticipantRole:
            assert scoring.credit_score(role, 10_000) == scoring.CREDIT_SCORE_CAP

    def test_every_role_has_a_policy(self):
        assert set(scoring.ROLE_SCORE_POLICIES) == set(ParticipantRole)

    def test_unknown_role(self):
        with pytest.raises(ValidationError):
            scoring.credit_score("admin", 10)


class TestLoanReadiness:
    """Tests for scoring.loan_readiness."""

    def test_readiness_grows_with_points(self):
        assert scoring.loan_readiness("rider", 0) == 60
        assert scoring.loan_readiness("rider", 80) == 70

    def test_capped_at_100(self):
        assert scoring.loan_readiness("health_worker", 1_000) == scoring.LOAN_READINESS_CAP

    def test_policy_is_immutable(self):
        policy = scoring.get_policy(ParticipantRole.CHV)
        with pytest.raises(Exception):
            policy.base = 0
