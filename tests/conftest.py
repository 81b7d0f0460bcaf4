import asyncio
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.config import settings

# Override settings for tests
settings.cache_backend = "memory"
settings.app_env = "development"

from app.db.base import Base  # noqa: E402
from app.gateway.analyzer import BaseContentAnalyzer  # noqa: E402
from app.gateway.cache import InMemoryResponseCache  # noqa: E402
from app.gateway.cross_check import CrossChecker  # noqa: E402
from app.gateway.gateway import ContentGateway  # noqa: E402
from app.gateway.types import AiProvider, CrossCheckAnalysis, GatewayLimits  # noqa: E402
from app.gateway.vendor_adapters import BaseProviderAdapter  # noqa: E402
from app.main import app  # noqa: E402


class FakeAdapter(BaseProviderAdapter):
    """In-process adapter: returns canned text, optionally slow or failing."""

    env_var = "FAKE_API_KEY"
    default_model = "fake"

    def __init__(self, provider: AiProvider, text: str | None = None, error: Exception | None = None, delay: float = 0.0):
        super().__init__(api_key="test-key")
        self.provider = provider
        self.text = text if text is not None else f"{provider.value} draft"
        self.error = error
        self.delay = delay
        self.prompts: list[str] = []

    async def invoke(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.text


class FakeAnalyzer(BaseContentAnalyzer):
    """Returns a fixed analysis, or None / an error for chosen providers."""

    def __init__(self, skip: set[AiProvider] | None = None, fail: dict[AiProvider, Exception] | None = None):
        self.skip = skip or set()
        self.fail = fail or {}
        self.calls: list[tuple[str, AiProvider]] = []

    async def analyze(self, content: str, provider: AiProvider) -> CrossCheckAnalysis | None:
        self.calls.append((content, provider))
        if provider in self.fail:
            raise self.fail[provider]
        if provider in self.skip:
            return None
        return CrossCheckAnalysis(
            tone="warm",
            perspective="second person",
            unique_insights=[f"{provider.value} insight"],
            strengths=["vivid imagery"],
            recommended_sections=["Intro"],
        )


@pytest.fixture
def adapters() -> dict[AiProvider, FakeAdapter]:
    return {p: FakeAdapter(p) for p in AiProvider}


@pytest.fixture
def gateway(adapters) -> ContentGateway:
    return ContentGateway(
        cache=InMemoryResponseCache(),
        limits=GatewayLimits(rate_limit_window_seconds=60, rate_limit_max_requests=10, max_concurrent_requests=3),
        adapters=adapters,
    )


@pytest.fixture
def analyzer() -> FakeAnalyzer:
    return FakeAnalyzer()


@pytest.fixture
def make_analyzer():
    return FakeAnalyzer


@pytest.fixture
async def client(gateway: ContentGateway, analyzer: FakeAnalyzer) -> AsyncGenerator[AsyncClient, None]:
    # ASGITransport does not run the lifespan; wire app state directly
    app.state.gateway = gateway
    app.state.cross_checker = CrossChecker(gateway, analyzer)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """In-memory SQLite with the ai_responses table."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()
