"""UI endpoints that render the alerts and rules pages of the ruler."""

import posixpath
from dataclasses import dataclass, field
from typing import Dict, List

from fastapi import APIRouter, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from .base_ui import BaseUI
from .config import Settings
from .instrumentation import InstrumentationMiddleware
from .rules import AlertingRule, AlertState, RuleManager, sort_alerts


def _default_row_classes() -> Dict[AlertState, str]:
    return {
        AlertState.INACTIVE: "success",
        AlertState.PENDING: "warning",
        AlertState.FIRING: "danger",
    }


@dataclass
class AlertStatus:
    """Alerting rules in display order plus the row style of each state."""

    alerting_rules: List[AlertingRule]
    alert_state_to_row_class: Dict[AlertState, str] = field(default_factory=_default_row_classes)


class RuleUI(BaseUI):
    def __init__(self, settings: Settings, rule_manager: RuleManager) -> None:
        super().__init__(settings, "rule_menu.html")
        self.rule_manager = rule_manager

    async def root(self, request: Request) -> RedirectResponse:
        """Redirect to the alerts page under the request's path prefix."""

        prefix = self.get_web_prefix(request)
        target = posixpath.normpath(posixpath.join(prefix or "/", "alerts"))
        if target.startswith("/"):
            # "//host/..." would leave the site
            target = "/" + target.lstrip("/")
        return RedirectResponse(url=target, status_code=status.HTTP_302_FOUND)

    async def alerts(self, request: Request) -> HTMLResponse:
        alert_status = AlertStatus(alerting_rules=sort_alerts(self.rule_manager.alerting_rules()))
        prefix = self.get_web_prefix(request)
        # TODO: surface partial response warnings once the manager reports them.
        return self.execute_template(request, "alerts.html", prefix, alert_status)

    async def rules(self, request: Request) -> HTMLResponse:
        prefix = self.get_web_prefix(request)
        return self.execute_template(request, "rules.html", prefix, list(self.rule_manager.rule_groups()))

    def register(self, router: APIRouter, ins: InstrumentationMiddleware) -> None:
        router.add_api_route(
            "/", ins.new_handler("root", self.root), methods=["GET"], include_in_schema=False
        )
        router.add_api_route(
            "/alerts", ins.new_handler("alerts", self.alerts), methods=["GET"], response_class=HTMLResponse
        )
        router.add_api_route(
            "/rules", ins.new_handler("rules", self.rules), methods=["GET"], response_class=HTMLResponse
        )
        router.add_api_route(
            "/static/{filepath:path}",
            ins.new_handler("static", self.serve_static_asset),
            methods=["GET"],
            include_in_schema=False,
        )
