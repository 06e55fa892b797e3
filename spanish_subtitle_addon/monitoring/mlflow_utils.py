from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from importlib import metadata
from typing import Any, Callable, Dict, Iterator, Optional

from mlflow.tracking import MlflowClient

from spanish_subtitle_addon.core.config import AddonSettings

log = logging.getLogger(__name__)

# Run id of the request being handled; each asyncio task sees its own value.
_ACTIVE_RUN_ID: ContextVar[Optional[str]] = ContextVar("mlflow_active_run_id", default=None)


def _package_version() -> str:
    try:
        return metadata.version("spanish-subtitle-addon")
    except metadata.PackageNotFoundError:
        return "unknown"


class MLflowLogger:
    """Tracks pipeline runs in MLflow on a best-effort basis.

    Every call is a no-op without a tracking URI. Tracking errors are logged and
    never reach the caller, so a broken backend only costs the metrics.
    """

    def __init__(
        self,
        tracking_uri: str,
        experiment_name: str,
        env: str,
        model_id: str = "n/a",
        client: Optional[Any] = None,
    ) -> None:
        self._tracking_uri = tracking_uri
        self._experiment_name = experiment_name
        self._env = env
        self._model_id = model_id
        self._client = client
        if self._client is None and self._tracking_uri:
            try:
                self._client = MlflowClient(tracking_uri=self._tracking_uri)
            except Exception:
                log.warning("MLflow tracking disabled, client for %s failed", self._tracking_uri, exc_info=True)

    @classmethod
    def from_settings(cls, settings: AddonSettings) -> "MLflowLogger":
        model_id = settings.gemini_model if settings.translation_provider == "gemini" else settings.openai_model
        return cls(
            tracking_uri=settings.mlflow_tracking_uri,
            experiment_name=settings.mlflow_experiment_name,
            env=settings.env,
            model_id=model_id,
        )

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def _safely(self, action: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except Exception:
            log.warning("MLflow %s failed", action, exc_info=True)
            return None

    def _open_run(self, run_name: str) -> Optional[str]:
        def create() -> str:
            experiment = self._client.get_experiment_by_name(self._experiment_name)
            if experiment is None:
                experiment_id = self._client.create_experiment(self._experiment_name)
            else:
                experiment_id = experiment.experiment_id
            run = self._client.create_run(
                experiment_id,
                run_name=run_name,
                tags={
                    "version": _package_version(),
                    "env": self._env,
                    "model_id": self._model_id,
                },
            )
            return run.info.run_id

        return self._safely("run setup", create)

    @contextmanager
    def start_run(self, run_name: str) -> Iterator[None]:
        run_id = self._open_run(run_name) if self.enabled else None
        token = _ACTIVE_RUN_ID.set(run_id)
        status = "FINISHED"
        try:
            yield
        except BaseException:
            status = "FAILED"
            raise
        finally:
            _ACTIVE_RUN_ID.reset(token)
            if run_id:
                self._safely("run termination", self._client.set_terminated, run_id, status)

    def log_params(self, params: Dict[str, object]) -> None:
        run_id = _ACTIVE_RUN_ID.get()
        if not run_id:
            return
        for key, value in params.items():
            self._safely("log_param", self._client.log_param, run_id, key, value)

    def log_metric(self, key: str, value: float) -> None:
        run_id = _ACTIVE_RUN_ID.get()
        if run_id:
            self._safely("log_metric", self._client.log_metric, run_id, key, value)

    def log_tool_call(
        self,
        tool_name: str,
        latency_ms: float,
        success: bool,
        response_bytes: int,
    ) -> None:
        self.log_metric(f"tool_{tool_name}_latency_ms", latency_ms)
        self.log_metric(f"tool_{tool_name}_response_bytes", response_bytes)
        self.log_metric(f"tool_{tool_name}_success", 1 if success else 0)
