from core.config import Settings
from core.utils import AMOUNT_PLACEHOLDER
from schema import ActionGetResponse, ActionLinks, ActionParameter, ActionRule, ActionsJson, LinkedAction

TIP_API_PATH = "/api/tip"
TIP_PATH_PATTERN = "/tip"

# Headers required by the Solana Actions spec; wallets call from any origin.
ACTION_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, Content-Encoding, Accept-Encoding",
    "X-Action-Version": "1",
    "X-Blockchain-Ids": "solana",
}

ACTIONS_JSON_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
}


def build_action_descriptor(setting: Settings) -> ActionGetResponse:
    """Describe the tip action and the amounts offered to the user."""
    actions = [
        LinkedAction(label=f"{amount} SOL", href=f"{TIP_API_PATH}?amount={amount}")
        for amount in setting.tip_amounts
    ]
    if setting.allow_custom_amount:
        actions.append(
            LinkedAction(
                label=setting.label,
                href=f"{TIP_API_PATH}?amount={AMOUNT_PLACEHOLDER}",
                parameters=[ActionParameter(name="amount", label=setting.custom_amount_label)],
            )
        )

    return ActionGetResponse(
        icon=setting.icon,
        title=setting.title,
        description=setting.description,
        label=setting.label,
        links=ActionLinks(actions=actions),
    )


def build_actions_json() -> ActionsJson:
    return ActionsJson(rules=[ActionRule(pathPattern=TIP_PATH_PATTERN, apiPath=TIP_API_PATH)])
