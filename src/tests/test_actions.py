import pytest
from pydantic import ValidationError
from core.actions import build_action_descriptor
from core.config import Settings


def test_descriptor_without_custom_amount():
    descriptor = build_action_descriptor(Settings(tip_amounts=["0.5", "1", "2"], allow_custom_amount=False))

    actions = descriptor.model_dump(exclude_none=True)["links"]["actions"]
    assert [action["label"] for action in actions] == ["0.5 SOL", "1 SOL", "2 SOL"]
    assert [action["href"] for action in actions] == [
        "/api/tip?amount=0.5",
        "/api/tip?amount=1",
        "/api/tip?amount=2",
    ]
    assert all(action["type"] == "post" and "parameters" not in action for action in actions)


def test_descriptor_with_custom_amount():
    descriptor = build_action_descriptor(Settings(tip_amounts=["0.25"], allow_custom_amount=True))

    actions = descriptor.links.actions
    assert [action.href for action in actions] == ["/api/tip?amount=0.25", "/api/tip?amount={amount}"]
    assert actions[-1].parameters[0].name == "amount"


@pytest.mark.parametrize("amounts", [["abc"], ["0.1", "0"], ["{amount}"], ["1e20"]])
def test_settings_reject_bad_tip_amounts(amounts):
    with pytest.raises(ValidationError):
        Settings(tip_amounts=amounts)


def test_settings_reject_bad_recipient():
    with pytest.raises(ValidationError):
        Settings(recipient_address="not-a-key")
