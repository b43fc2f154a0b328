import pytest

from senpi.plugins import resolve_action
from senpi.plugins.orders import SenpiOrdersAction
from senpi.plugins.stop_loss import StopLossAction


class TestResolveAction:
    """Exact action names take precedence over similes"""

    def test_stop_loss_reaches_its_own_action(self):
        action = resolve_action("STOP_LOSS")

        assert action.name == "STOP_LOSS"
        assert isinstance(action, StopLossAction)

    def test_exact_match_is_case_insensitive(self):
        assert resolve_action("stop_loss").name == "STOP_LOSS"

    def test_simile_still_resolves(self):
        assert isinstance(resolve_action("SWAP_SL_LO"), SenpiOrdersAction)

    def test_unknown_name(self):
        with pytest.raises(KeyError):
            resolve_action("NOT_AN_ACTION")
