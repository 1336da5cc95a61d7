"""Abstract base class for all extraction pipeline stages."""

from abc import ABC, abstractmethod
from typing import Any
import logging

from services import lexicon

logger = logging.getLogger(__name__)


class BaseStage(ABC):
    """Base class for pipeline stages.

    Subclasses must implement:
        - stage_name: identifier used in logs
        - predict(**kwargs): run the deterministic stage and return a typed schema

    Subclasses list the lexicon tables they read in ``tables``; ``load()``
    reads them once so a bad override fails at startup, not mid-request.
    Stages with an LLM strategy or blocking I/O override ``apredict``;
    the orchestrator awaits ``apredict`` for every stage.
    """

    stage_name: str = ""
    tables: tuple[str, ...] = ()
    _loaded: bool = False

    def load(self) -> None:
        """Load lexicon tables. Called once by ensure_loaded()."""
        for name in self.tables:
            lexicon.load_table(name)

    @abstractmethod
    def predict(self, **kwargs: Any) -> Any:
        """Run the stage. Returns a Pydantic schema defined per stage."""

    async def apredict(self, **kwargs: Any) -> Any:
        """Async entry point used by the orchestrator."""
        return self.predict(**kwargs)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def ensure_loaded(self) -> None:
        """Load stage resources if not already loaded."""
        if not self._loaded:
            logger.info("Loading stage: %s", self.stage_name)
            self.load()
            self._loaded = True
            logger.info("Stage loaded: %s", self.stage_name)
