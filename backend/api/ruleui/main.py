# ruleui main
import logging
from typing import Optional

from fastapi import APIRouter, FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from . import __version__
from .config import Settings, settings as default_settings
from .instrumentation import InstrumentationMiddleware
from .rule_ui import RuleUI
from .rules import RuleManager, StaticRuleManager

log = logging.getLogger("ruleui.api")


def _load_rule_manager(settings: Settings) -> RuleManager:
    if settings.rules_snapshot_path:
        return StaticRuleManager.from_yaml(settings.rules_snapshot_path)
    log.info("No rules snapshot configured; serving an empty rule set")
    return StaticRuleManager()


def create_app(
    rule_manager: Optional[RuleManager] = None,
    settings: Optional[Settings] = None,
    registry: Optional[CollectorRegistry] = None,
) -> FastAPI:
    settings = settings or default_settings
    logging.basicConfig(level=settings.log_level.upper())

    if rule_manager is None:
        rule_manager = _load_rule_manager(settings)

    app = FastAPI(title="Rule UI", version=__version__)

    # CORS
    allowed = settings.allowed_origins
    origins = ["*"] if allowed == "*" else [o.strip() for o in str(allowed).split(",") if o.strip()]
    app.add_middleware(CORSMiddleware, allow_origins=origins, allow_methods=["*"], allow_headers=["*"])

    ins = InstrumentationMiddleware(registry)

    # Liveness
    @app.get("/healthz")
    async def healthz():
        return {"ok": True}

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        return Response(generate_latest(ins.registry), media_type=CONTENT_TYPE_LATEST)

    router = APIRouter()
    RuleUI(settings, rule_manager).register(router, ins)
    app.include_router(router)
    return app


app = create_app()
