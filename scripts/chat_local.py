#!/usr/bin/env python3
"""
Interactive local chat harness (no HTTP, no WhatsApp).

Usage:
  python3 scripts/chat_local.py [tenant_id]

Runs your typed messages through the same orchestrator the webhooks use and
prints the state transition plus every structured reply.
"""

from __future__ import annotations

import os
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from slotbot.application.fsm.base import ConversationContext
from slotbot.application.use_cases.classify_intent import ClassifyIntentUseCase
from slotbot.application.use_cases.handle_incoming_message import CLASSIFIED_STATES
from slotbot.core.config import settings
from slotbot.domain.entities.outbound_message import ButtonsMessage, ListMessage, OutboundMessage
from slotbot.domain.entities.session import new_session
from slotbot.wiring.dependencies import (
    get_intent_classifier,
    get_orchestrator,
    get_resolve_tenant_use_case,
    get_session_store,
)


def _render(message: OutboundMessage) -> str:
    lines = [message.text]
    if isinstance(message, ButtonsMessage):
        lines.extend(f"  [{option}]" for option in message.options)
    elif isinstance(message, ListMessage):
        lines.append(f"  == {message.title} ({message.button_label}) ==")
        lines.extend(f"  - {row.title}" + (f"  ({row.description})" if row.description else "") for row in message.rows)
    return "\n".join(lines)


def main() -> None:
    tenant = get_resolve_tenant_use_case().execute(sys.argv[1] if len(sys.argv) > 1 else "default-business")
    customer_id = os.getenv("CHAT_CUSTOMER_ID", "local_user_1")
    sessions = get_session_store()
    orchestrator = get_orchestrator()
    classify = ClassifyIntentUseCase(classifier=get_intent_classifier())

    print("\nLocal Chat Harness")
    print("-" * 60)
    print(f"tenant: {tenant.tenant_id}  customer: {customer_id}")
    print("Commands: /new (new customer), /quit")
    print("-" * 60)

    while True:
        try:
            user_text = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not user_text:
            continue
        if user_text.lower() in ("/quit", "/exit"):
            print("Bye!")
            return
        if user_text.lower() == "/new":
            customer_id = f"local_user_{int(time.time())}"
            print(f"New customer: {customer_id}")
            continue

        session = sessions.get_session(tenant.tenant_id, customer_id) or new_session(
            tenant.tenant_id, customer_id, now_ts=time.time(), ttl_seconds=settings.SESSION_TTL_SECONDS
        )
        intent = classify.execute(user_text).intent if session.state in CLASSIFIED_STATES else None

        outcome = orchestrator.process(
            ConversationContext(
                tenant_id=tenant.tenant_id,
                platform=tenant.platform,
                customer_id=customer_id,
                session=session,
                text=user_text,
                intent=intent,
            )
        )
        print(f"[{session.state.value} -> {outcome.session.state.value}] intent={intent}")
        for reply in outcome.result.messages:
            print(_render(reply))


if __name__ == "__main__":
    main()
