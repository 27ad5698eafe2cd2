#!/usr/bin/env python3
"""Thread-local HTTP session management."""

import threading
import requests


class ThreadLocalSessionManager:
    """One ``requests.Session`` per calling thread.

    Sessions are not documented as thread-safe, so concurrent callers sharing a
    client each get their own connection pool. Retries are disabled at the
    adapter level; RetryPolicy owns every retry decision.
    """

    def __init__(self, pool_maxsize: int = 4):
        self.pool_maxsize = pool_maxsize
        self._thread_local = threading.local()

    def get_session(self) -> requests.Session:
        if not hasattr(self._thread_local, 'session'):
            self._thread_local.session = self._create_session()
        return self._thread_local.session

    def _create_session(self) -> requests.Session:
        session = requests.Session()

        adapter = requests.adapters.HTTPAdapter(
            pool_connections=1,
            pool_maxsize=self.pool_maxsize,
            max_retries=0
        )
        session.mount('https://', adapter)
        session.mount('http://', adapter)

        return session

    def close(self):
        """Close the calling thread's session, if it has one."""
        session = getattr(self._thread_local, 'session', None)
        if session is not None:
            session.close()
            del self._thread_local.session
