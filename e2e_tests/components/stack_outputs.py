"""
Reads the values a deployed stack echoes back through its Outputs section.
"""

from dataclasses import dataclass
from typing import Any, Dict

API_OUTPUT = "HelloWorldApi"
FUNCTION_OUTPUT = "HelloWorldFunction"
ROLE_OUTPUT = "HelloWorldFunctionIamRole"


class StackOutputsError(Exception):
    """Raised when the stack is missing or does not expose the expected outputs."""


@dataclass(frozen=True)
class StackOutputs:
    api_url: str
    function_arn: str
    role_arn: str


def fetch_stack_outputs(cloudformation_client: Any, stack_name: str) -> StackOutputs:
    response = cloudformation_client.describe_stacks(StackName=stack_name)
    stacks = response.get("Stacks", [])
    if not stacks:
        raise StackOutputsError(f"Stack '{stack_name}' was not found.")

    outputs: Dict[str, str] = {
        output["OutputKey"]: output["OutputValue"]
        for output in stacks[0].get("Outputs", [])
    }
    missing = [
        key for key in (API_OUTPUT, FUNCTION_OUTPUT, ROLE_OUTPUT) if key not in outputs
    ]
    if missing:
        raise StackOutputsError(
            f"Stack '{stack_name}' is missing outputs: {', '.join(missing)}"
        )

    return StackOutputs(
        api_url=outputs[API_OUTPUT],
        function_arn=outputs[FUNCTION_OUTPUT],
        role_arn=outputs[ROLE_OUTPUT],
    )
