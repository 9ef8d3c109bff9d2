"""
Run state and progress events for the traversal controller.

The controller is the only writer of a RunState; observers (the API,
a UI) read snapshots or subscribe through a ProgressSink.
"""
from collections import deque
from typing import Deque, Dict, List, Optional

from inci_scraper.config import config
from inci_scraper.models.product import PageBucket, ScrapedProduct
from inci_scraper.models.run import LogEntry, LogType, Progress, RunPhase
from inci_scraper.utils.logger import LayerLogger


class ProgressSink:
    """
    Observer interface for a scraping run.

    The default implementation ignores every event; subclasses override
    the ones they need.
    """

    def on_progress(self, progress: Progress) -> None:
        pass

    def on_log(self, entry: LogEntry) -> None:
        pass

    def on_page_update(self, page: PageBucket) -> None:
        pass

    def on_product_scraped(self, product: ScrapedProduct) -> None:
        pass


class LogBuffer:
    """Append-only log keeping the most recent ``max_entries`` (oldest evicted first)."""

    def __init__(self, max_entries: Optional[int] = None):
        self.max_entries = max_entries or config.LOG_BUFFER_SIZE
        self._entries: Deque[LogEntry] = deque(maxlen=self.max_entries)

    def append(self, entry: LogEntry) -> None:
        self._entries.append(entry)

    def snapshot(self) -> List[LogEntry]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RunState:
    """
    Accumulated state of one run.

    Write methods also forward the matching event to the sink.
    """

    def __init__(self, sink: Optional[ProgressSink] = None, max_log_entries: Optional[int] = None):
        self.sink = sink or ProgressSink()
        self.phase = RunPhase.IDLE
        self.progress = Progress()
        self.products: List[ScrapedProduct] = []
        self.pages: List[PageBucket] = []
        self.logs = LogBuffer(max_log_entries)
        self.logger = LayerLogger("run_state")

    # -- writes (worker only) ---------------------------------------------

    def set_phase(self, phase: RunPhase) -> None:
        self.phase = phase

    def set_progress(self, current: int, total: int, phase: str) -> None:
        self.progress = Progress(current=current, total=total, phase=phase)
        self.sink.on_progress(self.progress)

    def log(self, entry_type: LogType, message: str, **extra) -> LogEntry:
        entry = LogEntry(type=entry_type, message=message)
        self.logs.append(entry)
        self.logger.log_run_event(entry_type.value, message, **extra)
        self.sink.on_log(entry)
        return entry

    def add_page(self, page: PageBucket) -> None:
        self.pages.append(page)
        self.publish_page(page)

    def publish_page(self, page: PageBucket) -> None:
        self.sink.on_page_update(page.model_copy(deep=True))

    def add_product(self, product: ScrapedProduct, page: Optional[PageBucket] = None) -> None:
        self.products.append(product)
        if page is not None:
            page.products.append(product)
        self.sink.on_product_scraped(product)

    # -- reads ----------------------------------------------------------------

    def find_page(self, offset: int) -> Optional[PageBucket]:
        for page in self.pages:
            if page.offset == offset:
                return page
        return None

    def summary(self) -> Dict:
        return {
            "phase": self.phase.value,
            "isFinished": self.phase.is_terminal,
            "progress": self.progress.to_dict(),
            "productCount": len(self.products),
            "pageCount": len(self.pages),
            "completedPages": sum(1 for p in self.pages if p.is_complete),
            "logCount": len(self.logs),
        }
