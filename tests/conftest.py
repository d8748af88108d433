"""
Shared fixtures

FakeEvaluator stands in for the Lua runtime so scanner and expander tests do
not depend on a script engine: it returns canned values keyed by the exact
source text it receives and records every call.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import pytest

from pplua.config.settings import AppSettings
from pplua.lib.output import OutputSink, DiversionStore
from pplua.lib.emitter import MarkupEmitter
from pplua.lib.preprocessor import Preprocessor
from pplua.lib.surface import SurfaceRegistry
from pplua.models.document import DocumentState
from pplua.models.values import Value

Response = Union[Value, Exception, Callable[[SurfaceRegistry], Value]]


class FakeEvaluator:
    """
    Evaluator returning scripted responses

    A response is a Value, an exception to raise, or a callable that
    receives the installed SurfaceRegistry (to simulate script side effects)
    and returns a Value. Unknown sources yield Value.none().
    """

    def __init__(self, responses: Optional[Dict[str, Response]] = None) -> None:
        self.responses: Dict[str, Response] = dict(responses or {})
        self.calls: List[Tuple[str, str]] = []
        self.registry: Optional[SurfaceRegistry] = None

    def surface_install(self, registry: SurfaceRegistry) -> None:
        self.registry = registry

    def execute(self, source: str, chunk: str) -> Value:
        self.calls.append((source, chunk))
        response: Any = self.responses.get(source, Value.none())
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(self.registry)
        return response


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(emit_lf=True, preamble_files=[], lua_paths=[])


@pytest.fixture
def fake() -> FakeEvaluator:
    return FakeEvaluator()


@pytest.fixture
def pp(settings: AppSettings, fake: FakeEvaluator) -> Preprocessor:
    return Preprocessor(settings, fake)


@pytest.fixture
def sink() -> OutputSink:
    return OutputSink()


@pytest.fixture
def store(sink: OutputSink) -> DiversionStore:
    return DiversionStore(sink)


@pytest.fixture
def emitter(store: DiversionStore) -> MarkupEmitter:
    return MarkupEmitter(store, DocumentState())
