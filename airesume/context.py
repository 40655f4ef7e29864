"""Application context: owns every stateful collaborator of the client."""
from __future__ import annotations

from typing import Callable

import requests

from airesume.api.auth import AuthService
from airesume.api.client import ApiClient
from airesume.api.employee import EmployeeService
from airesume.api.employer import EmployerService
from airesume.api.matching import MatchingService
from airesume.config import Settings, load_settings
from airesume.job_form import FormMode, JobPostingForm
from airesume.log import get_logger
from airesume.models import JobPosting
from airesume.query import QueryCache
from airesume.storage import KeyValueStorage, MemoryStorage, Storage
from airesume.stores import AuthStore, ThemeStore

log = get_logger(__name__)


class AppContext:
    """Build with ``AppContext(settings)``, then ``open()`` before use and
    ``close()`` when done (or use it as a context manager).

    Auth and theme state live in ``storage``. It defaults to memory private
    to this context; the Streamlit app passes browser cookie storage, and
    :meth:`local` uses the file store for a single-user script.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        session: requests.Session | None = None,
        queries: QueryCache | None = None,
        storage: Storage | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.storage = storage if storage is not None else MemoryStorage()
        self.auth = AuthStore(self.storage)
        self.theme = ThemeStore(self.storage)
        self.queries = queries or QueryCache()
        self.api = ApiClient(
            self.settings.api_base_url,
            self.auth,
            timeout=self.settings.request_timeout,
            session=session,
        )
        self.auth_service = AuthService(self.api, self.auth)
        self.employer = EmployerService(self.api)
        self.employee = EmployeeService(self.api)
        self.matching = MatchingService(self.api)
        self.is_open = False

    @classmethod
    def local(cls, settings: Settings | None = None, **kwargs) -> "AppContext":
        """A context whose session survives restarts in ``settings.storage_dir``."""
        settings = settings or load_settings()
        return cls(settings, storage=KeyValueStorage(settings.storage_dir), **kwargs)

    def open(self, prefers_dark: Callable[[], bool] = lambda: False) -> "AppContext":
        self.auth.reload()
        self.theme.initialize(prefers_dark)
        self.is_open = True
        log.info("Client ready against %s", self.settings.api_base_url)
        return self

    def close(self) -> None:
        if not self.is_open:
            return
        self.queries.clear()
        self.api.close()
        self.is_open = False
        log.debug("Client closed")

    def __enter__(self) -> "AppContext":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()

    def logout(self) -> None:
        self.auth_service.logout()
        self.queries.clear()

    def job_form(self, job: JobPosting | None = None) -> JobPostingForm:
        """A create wizard, or an edit form when ``job`` is given."""
        mode = FormMode.EDIT if job is not None else FormMode.CREATE
        return JobPostingForm(self.employer, mode=mode, job=job, queries=self.queries)
