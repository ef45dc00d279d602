from functools import lru_cache
import logging

from slotbot.core.config import settings
from slotbot.application.fsm.base import FlowDependencies
from slotbot.application.fsm.orchestrator import ConversationOrchestrator, build_state_handlers
from slotbot.application.ports.booking_ledger import BookingLedgerPort
from slotbot.application.ports.llm import IntentClassifierPort
from slotbot.application.ports.message_platform import MessagePlatformPort
from slotbot.application.ports.session_store import SessionStorePort
from slotbot.application.ports.tenant_directory import TenantDirectoryPort
from slotbot.application.use_cases.availability import AvailabilityCalculator
from slotbot.application.use_cases.booking import BookingUseCase
from slotbot.application.use_cases.classify_intent import ClassifyIntentUseCase
from slotbot.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from slotbot.application.use_cases.resolve_tenant import ResolveTenantUseCase
from slotbot.application.use_cases.send_reply import SendReplyUseCase
from slotbot.infrastructure.llm.keyword_classifier import KeywordIntentClassifier
from slotbot.infrastructure.llm.openai_classifier import OpenAIIntentClassifier
from slotbot.infrastructure.messaging.mock_platform import MockPlatform
from slotbot.infrastructure.store.json_store import JsonBookingStore
from slotbot.infrastructure.store.memory_store import MemoryBookingStore
from slotbot.infrastructure.store.redis_store import RedisBookingStore
from slotbot.infrastructure.tenants.tenant_directory_store import TenantDirectoryStore
from slotbot.infrastructure.wati.wati_client import WatiClient
from slotbot.infrastructure.wati.wati_platform import WatiPlatform
from slotbot.infrastructure.whatsapp.whatsapp_client import WhatsAppCloudClient
from slotbot.infrastructure.whatsapp.whatsapp_platform import WhatsAppCloudPlatform


_store: MemoryBookingStore | JsonBookingStore | RedisBookingStore | None = None


def get_store() -> MemoryBookingStore | JsonBookingStore | RedisBookingStore:
    """One object serves both the session store and the booking ledger."""
    global _store
    if _store is None:
        provider = settings.STORE_PROVIDER.lower()
        if provider == "redis":
            _store = RedisBookingStore.from_url(settings.REDIS_URL)
        elif provider == "json":
            _store = JsonBookingStore(data_dir=settings.DATA_DIR)
        else:
            _store = MemoryBookingStore()
        logging.getLogger(__name__).info("Store provider=%s", provider)
    return _store


def get_session_store() -> SessionStorePort:
    return get_store()


def get_booking_ledger() -> BookingLedgerPort:
    return get_store()


@lru_cache
def get_tenant_directory() -> TenantDirectoryPort:
    if settings.TENANTS_FILE:
        return TenantDirectoryStore.from_file(settings.TENANTS_FILE)
    return TenantDirectoryStore()


@lru_cache
def get_intent_classifier() -> IntentClassifierPort:
    if settings.OPENAI_API_KEY and settings.OPENAI_API_KEY.strip():
        return OpenAIIntentClassifier()
    return KeywordIntentClassifier()


@lru_cache
def get_platform(name: str) -> MessagePlatformPort:
    logger = logging.getLogger(__name__)
    platform = (name or "").lower()
    dev = settings.ENV.lower() in {"dev", "local"}

    if platform == "whatsapp":
        if settings.META_ACCESS_TOKEN and settings.META_PHONE_NUMBER_ID:
            client = WhatsAppCloudClient(
                access_token=settings.META_ACCESS_TOKEN,
                phone_number_id=settings.META_PHONE_NUMBER_ID,
                api_version=settings.META_GRAPH_API_VERSION,
            )
            return WhatsAppCloudPlatform(client=client)
        if not dev:
            raise ValueError("META_ACCESS_TOKEN and META_PHONE_NUMBER_ID are required to send WhatsApp replies.")
    elif platform == "wati":
        if settings.WATI_API_URL and settings.WATI_API_TOKEN:
            return WatiPlatform(client=WatiClient(api_url=settings.WATI_API_URL, api_token=settings.WATI_API_TOKEN))
        if not dev:
            raise ValueError("WATI_API_URL and WATI_API_TOKEN are required to send WATI replies.")
    elif not dev:
        raise ValueError(f"Unsupported messaging platform: {name!r}")

    logger.info("Using MockPlatform (credentials missing, ENV=dev/local)", extra={"reason": platform})
    return MockPlatform(name=platform or "mock")


def get_availability_calculator() -> AvailabilityCalculator:
    return AvailabilityCalculator(ledger=get_booking_ledger())


def get_booking_use_case() -> BookingUseCase:
    return BookingUseCase(ledger=get_booking_ledger(), lock_ttl_seconds=settings.SLOT_LOCK_TTL_SECONDS)


def get_orchestrator() -> ConversationOrchestrator:
    deps = FlowDependencies(
        tenants=get_tenant_directory(),
        availability=get_availability_calculator(),
        booking=get_booking_use_case(),
        max_list_rows=settings.MAX_LIST_ROWS,
    )
    return ConversationOrchestrator(
        handlers=build_state_handlers(deps),
        sessions=get_session_store(),
        session_ttl_seconds=settings.SESSION_TTL_SECONDS,
    )


def get_resolve_tenant_use_case() -> ResolveTenantUseCase:
    return ResolveTenantUseCase(directory=get_tenant_directory(), default_tenant_id=settings.DEFAULT_TENANT_ID)


def get_handle_incoming_message_use_case() -> HandleIncomingMessageUseCase:
    return HandleIncomingMessageUseCase(
        sessions=get_session_store(),
        orchestrator=get_orchestrator(),
        classify_intent=ClassifyIntentUseCase(classifier=get_intent_classifier()),
        send_reply=SendReplyUseCase(get_platform=get_platform),
        session_ttl_seconds=settings.SESSION_TTL_SECONDS,
    )
