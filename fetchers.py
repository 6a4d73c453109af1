"""Stateful product fetchers for catalog views.

Each fetcher keeps at most one request in flight: starting a new fetch cancels
the previous one, and a cancelled request never writes state. Errors are
recorded in ``error`` and are not retried.
"""
import asyncio
import inspect
import logging

from filters import FilterState
from product_service import DEFAULT_PAGE_SIZE

logger = logging.getLogger(__name__)

DEBOUNCE_DELAY = 0.3


def _cancelled_from_outside():
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


class _SingleFlight:
    def __init__(self):
        self._task = None
        self.closed = False

    def cancel_in_flight(self):
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def run(self, coro):
        """Run ``coro`` as the only in-flight request.

        Returns quietly when a newer request (or ``close()``) supersedes it.
        """
        self.cancel_in_flight()
        task = asyncio.ensure_future(coro)
        self._task = task
        try:
            await task
        except asyncio.CancelledError:
            if _cancelled_from_outside() or not task.cancelled():
                raise
        finally:
            if self._task is task:
                self._task = None

    def close(self):
        self.closed = True
        self.cancel_in_flight()

    @property
    def in_flight(self):
        return self._task is not None and not self._task.done()


class ProductsFetcher:
    """One page of products plus the catalog facets."""

    def __init__(self, service, initial_filters=None, limit=DEFAULT_PAGE_SIZE):
        self.service = service
        self.limit = limit
        self.filters = initial_filters

        self.products = []
        self.loading = False
        self.error = None
        self.total_products = 0
        self.current_page = 1
        self.total_pages = 1
        self.filters_data = None

        self._flight = _SingleFlight()

    async def start(self):
        await self.fetch_products(self.filters)

    async def fetch_products(self, filters=None, page=1):
        if self._flight.closed:
            return
        self.filters = filters
        self.loading = True
        self.error = None
        await self._flight.run(self._load(filters, page))

    async def _load(self, filters, page):
        try:
            response = await self.service.get_products(filters, page, self.limit)
        except Exception as exc:
            logger.error("Failed to fetch products: %s", exc)
            self.error = str(exc) or "Failed to fetch products"
            self.products = []
            self.loading = False
            return

        self.products = list(response.products)
        self.total_products = response.total
        self.current_page = response.page
        self.total_pages = response.total_pages
        if response.filters is not None:
            self.filters_data = response.filters
        self.loading = False

    async def refetch(self):
        await self.fetch_products(self.filters, self.current_page)

    def close(self):
        self._flight.close()


class InfiniteProductsFetcher:
    """Accumulates pages for infinite scrolling.

    Page 1 replaces the list, later pages are appended. ``load_more`` is
    ignored while a load is running or when the last page has been reached.
    """

    def __init__(self, service, filters=None, limit=DEFAULT_PAGE_SIZE, enabled=True):
        self.service = service
        self.filters = filters or FilterState()
        self.limit = limit
        self.enabled = enabled

        self.products = []
        self.loading = False
        self.loading_more = False
        self.error = None
        self.current_page = 1
        self.total_pages = 1
        self.has_more = True

        self._flight = _SingleFlight()

    async def start(self):
        if self.enabled:
            self.reset()
            await self._fetch(1, append=False)

    def reset(self):
        self.products = []
        self.current_page = 1
        self.has_more = True
        self.error = None

    async def set_filters(self, filters):
        filters = filters or FilterState()
        if filters.cache_key() == self.filters.cache_key():
            return
        self.filters = filters
        if self.enabled:
            self.reset()
            await self._fetch(1, append=False)

    async def load_more(self):
        if self.loading or self.loading_more or not self.has_more:
            return
        await self._fetch(self.current_page + 1, append=True)

    async def refetch(self):
        await self._fetch(self.current_page, append=False)

    async def _fetch(self, page, append):
        if self._flight.closed:
            return
        # flags go up before the first await so a second caller sees them
        if page == 1:
            self.loading = True
        else:
            self.loading_more = True
        self.error = None
        await self._flight.run(self._load(self.filters, page, append))

    async def _load(self, filters, page, append):
        try:
            response = await self.service.get_products(filters, page, self.limit)
        except Exception as exc:
            logger.error("Failed to fetch products: %s", exc)
            self.error = str(exc) or "Failed to fetch products"
            if not append:
                self.products = []
            self.loading = False
            self.loading_more = False
            return

        if append:
            self.products = [*self.products, *response.products]
        else:
            self.products = list(response.products)
        self.current_page = page
        self.total_pages = response.total_pages
        self.has_more = page < response.total_pages
        self.loading = False
        self.loading_more = False

    def close(self):
        self._flight.close()


class Debouncer:
    """Trailing-edge debounce: only the last call within ``delay`` seconds runs."""

    def __init__(self, callback, delay=DEBOUNCE_DELAY):
        self.callback = callback
        self.delay = delay
        self._task = None

    def __call__(self, *args, **kwargs):
        self.cancel()
        self._task = asyncio.ensure_future(self._fire(args, kwargs))
        return self._task

    async def _fire(self, args, kwargs):
        await asyncio.sleep(self.delay)
        result = self.callback(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result

    def cancel(self):
        if self._task is not None and not self._task.done():
            self._task.cancel()

    @property
    def pending(self):
        return self._task is not None and not self._task.done()
