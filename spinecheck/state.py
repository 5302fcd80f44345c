from contextlib import asynccontextmanager

from spinecheck.schemas.analysis import AnalysisResult
from spinecheck.utils.exceptions import Busy


class AppState:
    """What the single local user is currently looking at.

    The app serves one user on one machine, so this lives for the whole
    process. Busy flags are checked and set without an await in between,
    which makes them atomic on the event loop.
    """

    def __init__(self):
        self.last_result: AnalysisResult | None = None
        self.analysis_busy = False
        self.submission_busy = False

    @asynccontextmanager
    async def analysis_slot(self):
        if self.analysis_busy:
            raise Busy("이미 분석이 진행 중입니다. 잠시만 기다려주세요.")
        self.analysis_busy = True
        try:
            yield
        finally:
            self.analysis_busy = False

    @asynccontextmanager
    async def submission_slot(self):
        if self.submission_busy:
            raise Busy("상담 신청을 전송 중입니다. 잠시만 기다려주세요.")
        self.submission_busy = True
        try:
            yield
        finally:
            self.submission_busy = False

    def reset(self) -> None:
        # An in-flight analysis still finishes; only the shown result is dropped
        self.last_result = None


app_state = AppState()
