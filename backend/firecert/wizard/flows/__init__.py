"""Registered wizard flows, looked up by name."""

from firecert.wizard.flows.base import FieldGroup, Flow
from firecert.wizard.flows.certification import CERTIFICATION_FLOW
from firecert.wizard.flows.checklist import CHECKLIST_FLOW
from firecert.wizard.flows.registration import REGISTRATION_FLOW

FLOWS: dict[str, Flow] = {
    flow.name: flow
    for flow in (REGISTRATION_FLOW, CERTIFICATION_FLOW, CHECKLIST_FLOW)
}


def get_flow(name: str) -> Flow:
    try:
        return FLOWS[name]
    except KeyError:
        raise ValueError(f"Unknown wizard flow: {name}") from None


__all__ = ["FLOWS", "FieldGroup", "Flow", "get_flow"]
