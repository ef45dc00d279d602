from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable

from slotbot.application.fsm import messages
from slotbot.application.fsm.prompts import days_prompt, services_prompt, times_prompt, turns_prompt
from slotbot.application.ports.tenant_directory import TenantDirectoryPort
from slotbot.application.use_cases.availability import AvailabilityCalculator
from slotbot.application.use_cases.booking import BookingUseCase
from slotbot.application.utils.message_rules import normalize_text
from slotbot.application.utils.slot_times import local_today
from slotbot.domain.entities.business_config import BusinessConfig
from slotbot.domain.entities.conversation_status import ConversationStatus
from slotbot.domain.entities.outbound_message import OutboundMessage
from slotbot.domain.entities.service import Service
from slotbot.domain.entities.session import Session


@dataclass(frozen=True)
class ConversationContext:
    tenant_id: str
    platform: str
    customer_id: str
    session: Session
    text: str
    intent: str | None = None


@dataclass(frozen=True)
class HandlerResult:
    new_state: ConversationStatus
    messages: list[OutboundMessage] = field(default_factory=list)
    memory_update: dict[str, Any] | None = None


@dataclass(frozen=True)
class FlowDependencies:
    tenants: TenantDirectoryPort
    availability: AvailabilityCalculator
    booking: BookingUseCase
    max_list_rows: int = 10
    today: Callable[[str], date] = local_today


def match_service(text: str, services: list[Service]) -> Service | None:
    """First service whose name or id appears in the text."""
    normalized = normalize_text(text)
    if not normalized:
        return None
    for service in services:
        if normalize_text(service.name) in normalized or normalize_text(service.id) in normalized:
            return service
    return None


class StateHandler(ABC):
    def __init__(self, deps: FlowDependencies) -> None:
        self._deps = deps
        self._logger = logging.getLogger(type(self).__module__)

    @abstractmethod
    def handle(self, ctx: ConversationContext) -> HandlerResult:
        raise NotImplementedError

    def _config(self, ctx: ConversationContext) -> BusinessConfig:
        return self._deps.tenants.get_config(ctx.tenant_id)

    def _services(self, ctx: ConversationContext) -> list[Service]:
        return self._deps.tenants.list_services(ctx.tenant_id)

    def _current_service(self, ctx: ConversationContext) -> Service | None:
        return self._deps.tenants.get_service(ctx.tenant_id, ctx.session.memory.service_id)

    def _days(self, ctx: ConversationContext, service: Service) -> list[str]:
        config = self._config(ctx)
        return self._deps.availability.available_days(
            ctx.tenant_id,
            config,
            service,
            today=self._deps.today(config.timezone),
        )

    def _turns(self, ctx: ConversationContext, service: Service, day: str) -> list[str]:
        return self._deps.availability.available_turns(ctx.tenant_id, self._config(ctx), service, day)

    def _slots(self, ctx: ConversationContext, service: Service, day: str, turn: str) -> list[str]:
        config = self._config(ctx)
        turn_count = self._deps.availability.turn_count(config, day)
        return self._deps.availability.slots_for_turn(ctx.tenant_id, config, service, day, turn, turn_count)

    def _to_services(self, ctx: ConversationContext, text: str = messages.ASK_SERVICE_MESSAGE) -> HandlerResult:
        return HandlerResult(
            new_state=ConversationStatus.SELECT_SERVICE,
            messages=[services_prompt(self._services(ctx), text, self._deps.max_list_rows)],
        )

    def _to_days(self, ctx: ConversationContext, service: Service, text: str = messages.ASK_DAY_MESSAGE) -> HandlerResult:
        days = self._days(ctx, service)
        if not days:
            return self._to_services(ctx, messages.NO_DAYS_MESSAGE.format(service_name=service.name))
        return HandlerResult(
            new_state=ConversationStatus.SELECT_DAY,
            messages=[days_prompt(days, text, self._deps.max_list_rows)],
            memory_update={"date": None, "turn": None, "time": None},
        )

    def _to_turns(
        self,
        ctx: ConversationContext,
        service: Service,
        day: str,
        text: str = messages.ASK_TURN_MESSAGE,
    ) -> HandlerResult:
        turns = self._turns(ctx, service, day)
        if not turns:
            return self._to_days(ctx, service, messages.ASK_DAY_AGAIN_MESSAGE)
        return HandlerResult(
            new_state=ConversationStatus.SELECT_TURN,
            messages=[turns_prompt(turns, text, self._deps.max_list_rows)],
            memory_update={"date": day, "turn": None, "time": None},
        )

    def _to_times(
        self,
        ctx: ConversationContext,
        service: Service,
        day: str,
        turn: str,
        text: str = messages.ASK_TIME_MESSAGE,
    ) -> HandlerResult:
        slots = self._slots(ctx, service, day, turn)
        if not slots:
            return self._to_turns(ctx, service, day, messages.ASK_TURN_AGAIN_MESSAGE)
        return HandlerResult(
            new_state=ConversationStatus.SELECT_TIME,
            messages=[times_prompt(slots, text, self._deps.max_list_rows)],
            memory_update={"turn": turn, "time": None, "customer_name": None},
        )

    def _resume(self, ctx: ConversationContext) -> HandlerResult:
        """Re-enter the flow at the deepest step the stored memory still supports."""
        service = self._current_service(ctx)
        if service is None:
            return self._to_services(ctx)
        memory = ctx.session.memory
        if memory.date and memory.turn:
            return self._to_times(ctx, service, memory.date, memory.turn)
        if memory.date:
            return self._to_turns(ctx, service, memory.date)
        return self._to_days(ctx, service)
