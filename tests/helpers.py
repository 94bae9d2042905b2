"""Payload factories and a scripted LLM gateway shared by the test modules."""
import json
from collections import defaultdict


# ---------------------------------------------------------------------------
# Payload factories: JSON the role models would return
# ---------------------------------------------------------------------------

def clarifier_payload(
    *,
    question="Who pays when the vault opens?",
    ready=False,
    missing_signal="concrete stakes",
    option_ids=("A", "B", "C"),
    state_update=None,
):
    return {
        "hypothesis_line": "A pawnshop heist where the loot is a debt ledger",
        "question": question,
        "options": [{"id": oid, "label": f"Option {oid} with a brass key"} for oid in option_ids],
        "allow_free_text": True,
        "ready_for_hook": ready,
        "missing_signal": missing_signal,
        "state_update": state_update if state_update is not None else {},
    }


def builder_payload(premise="A locksmith must crack the vault her mother sealed"):
    return {
        "premise": premise,
        "opening_image": "A girl presses a stethoscope to a vault door in the rain",
        "page_1_splash_prompt": "Wide shot: flooded bank lobby, girl on a ladder at the vault",
        "page_turn_trigger": "The vault opens from the inside",
        "why_addictive": ["mystery box", "ticking clock", "family betrayal"],
        "collision_sources": [
            {"source": "Hatton Garden heist", "element_extracted": "drilling through a wall over a holiday weekend"},
            {"source": "Freemasonry", "element_extracted": "initiation by secret knock"},
            {"source": "Pawnbroker ledgers", "element_extracted": "debts transfer with the object"},
        ],
    }


def judge_payload(passed=True, scores=(7, 7, 7, 7, 7), hard_fail_reasons=()):
    names = ("specificity", "drawability", "page_turn", "mechanism", "freshness")
    return {
        "pass": passed,
        "hard_fail_reasons": list(hard_fail_reasons),
        "scores": dict(zip(names, scores)),
        "most_generic_part": "family betrayal",
        "one_fix_instruction": "Name the debt on the ledger",
    }


# ---------------------------------------------------------------------------
# Scripted gateway
# ---------------------------------------------------------------------------

class FakeLLM:
    """Drop-in for ``LLMClient.call`` that replays queued responses per role.

    Queue items may be a dict (sent as JSON), a str (sent as-is), an
    exception instance (raised), or a callable taking the user prompt and
    returning one of those.
    """

    def __init__(self):
        self.responses = defaultdict(list)
        self.calls = []

    def queue(self, role, *items):
        self.responses[role].extend(items)
        return self

    def queue_tournament(self, premises=("P1", "P2", "P3"), verdicts=None):
        """Queue one builder round plus its judge round."""
        verdicts = verdicts or [judge_payload() for _ in premises]
        self.queue("builder", *(builder_payload(premise=p) for p in premises))
        self.queue("judge", *verdicts)
        return self

    def calls_for(self, role):
        return [c for c in self.calls if c["role"] == role]

    async def call(
        self,
        role,
        system_prompt,
        user_prompt,
        *,
        temperature=0.7,
        max_tokens=1024,
        model_override=None,
        json_schema=None,
    ):
        self.calls.append({
            "role": role,
            "system": system_prompt,
            "user": user_prompt,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "model_override": model_override,
            "json_schema": json_schema,
        })
        if not self.responses[role]:
            raise AssertionError(f"No scripted response left for role {role!r}")
        item = self.responses[role].pop(0)
        if callable(item):
            item = item(user_prompt)
        if isinstance(item, Exception):
            raise item
        return item if isinstance(item, str) else json.dumps(item)
