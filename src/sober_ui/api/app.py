"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict

import httpx
from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.responses import RedirectResponse

from sober_ui.api.forms import (
    DrinkLogCreateForm,
    DrinkLogEditForm,
    DrinkLogSnapshot,
    LoginForm,
    ParseDrinkForm,
    ProfileForm,
    SignupForm,
)
from sober_ui.app_logging import configure_logging
from sober_ui.containers import AppContainer
from sober_ui.domain.drink_logs import DrinkLog
from sober_ui.domain.errors import ApiError, UnauthorizedError
from sober_ui.domain.notifications import Notification
from sober_ui.services.drink_entry import DrinkFormValues
from sober_ui.services.drink_logs import DrinkLogStore
from sober_ui.services.sessions import UserSession

LOGIN_ROUTE = "/login"
MAX_TREND_DAYS = 3650
MAX_DASHBOARD_MONTHS = 120


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)
    token_key = container.settings.token_key

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    def user_session(request: Request) -> UserSession:
        """Resolve the signed-in user's session from the token cookie."""
        state_container: AppContainer = request.app.state.container
        token = request.cookies.get(token_key)
        if not token:
            raise UnauthorizedError("Login required")
        return state_container.session_registry.get(token)

    @app.exception_handler(UnauthorizedError)
    async def unauthorized(request: Request, exc: UnauthorizedError) -> Response:
        """Log the user out and send them to the login page."""
        token = request.cookies.get(token_key)
        if token:
            request.app.state.container.session_registry.evict(token)
        logger.info("Redirecting to login", extra={"path": request.url.path})
        response = RedirectResponse(
            LOGIN_ROUTE, status_code=status.HTTP_303_SEE_OTHER
        )
        response.delete_cookie(token_key)
        return response

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/login")
    async def login_page() -> dict[str, str]:
        """Login page."""
        return {"page": "login"}

    @app.get("/signup")
    async def signup_page() -> dict[str, str]:
        """Signup page."""
        return {"page": "signup"}

    @app.post("/login")
    async def login(
        form: LoginForm, request: Request, response: Response
    ) -> dict[str, object]:
        """Log in and store the token cookie."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.auth_service.login(form.email, form.password)
        if result.token:
            response.set_cookie(
                token_key, result.token, httponly=True, samesite="lax"
            )
        return {
            **_form_result(result.notification),
            "redirect_to": result.redirect_to,
        }

    @app.post("/signup")
    async def signup(form: SignupForm, request: Request) -> dict[str, object]:
        """Create an account."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.auth_service.signup(form.email, form.password)
        return {
            **_form_result(result.notification),
            "redirect_to": result.redirect_to,
        }

    @app.post("/logout")
    async def logout(request: Request, response: Response) -> dict[str, str]:
        """Forget the token and its session."""
        token = request.cookies.get(token_key)
        if token:
            request.app.state.container.session_registry.evict(token)
        response.delete_cookie(token_key)
        return {"status": "ok", "redirect_to": LOGIN_ROUTE}

    @app.get("/me")
    async def me(session: UserSession = Depends(user_session)) -> dict[str, object]:
        """Return the signed-in user."""
        try:
            user = await session.client.get_current_user()
        except UnauthorizedError:
            raise
        except (ApiError, httpx.HTTPError):
            logger.exception("Failed to fetch current user")
            return {"user": None}
        return {"user": asdict(user)}

    @app.get("/drinks/history")
    async def drink_history(
        session: UserSession = Depends(user_session),
    ) -> dict[str, object]:
        """Reload the first page of drink logs and return them by day."""
        await session.drink_logs.refresh_drink_logs()
        return _history_view(session.drink_logs)

    @app.post("/drinks/history/more")
    async def more_drink_history(
        session: UserSession = Depends(user_session),
    ) -> dict[str, object]:
        """Load the next page of drink logs."""
        page = await session.drink_logs.fetch_more_drink_logs()
        return {
            "drink_logs": [asdict(drink) for drink in page],
            **_history_view(session.drink_logs),
        }

    @app.get("/drinks/templates")
    async def drink_templates(
        session: UserSession = Depends(user_session),
    ) -> dict[str, object]:
        """Return the drink template picker options."""
        templates = await session.drink_entry_service.list_templates()
        return {"drink_templates": [asdict(template) for template in templates]}

    @app.post("/drinks/parse")
    async def parse_drink(
        form: ParseDrinkForm, session: UserSession = Depends(user_session)
    ) -> dict[str, object]:
        """Pre-fill the drink form from a free-text description."""
        values, notification = await session.drink_entry_service.parse_free_text(
            form.text
        )
        return {
            "values": asdict(values) if values else None,
            "notification": asdict(notification) if notification else None,
        }

    @app.post("/drinks/log")
    async def log_drink(
        form: DrinkLogCreateForm, session: UserSession = Depends(user_session)
    ) -> dict[str, object]:
        """Log a new drink."""
        service = session.drink_entry_service
        if form.drink_template_id is not None:
            notification = await service.create_from_template(
                form.drink_template_id, form.size_value, form.size_unit, form.abv
            )
        else:
            notification = await service.create_from_text(
                free_text=form.free_text or "",
                name=form.name,
                size_value=form.size_value,
                size_unit=form.size_unit,
                abv_percent=form.abv,
            )
        return _form_result(notification)

    @app.put("/drinks/log/{drink_log_id}")
    async def edit_drink(
        drink_log_id: int,
        form: DrinkLogEditForm,
        session: UserSession = Depends(user_session),
    ) -> dict[str, object]:
        """Save edits to a drink log."""
        existing = _resolve_drink_log(session.drink_logs, drink_log_id, form.original)
        notification = await session.drink_entry_service.update(
            existing,
            DrinkFormValues(
                name=form.name,
                size_value=form.size_value,
                size_unit=form.size_unit,
                abv_percent=form.abv,
            ),
        )
        return _form_result(notification)

    @app.post("/drinks/log/{drink_log_id}/relog")
    async def relog_drink(
        drink_log_id: int,
        drink: DrinkLogSnapshot | None = None,
        session: UserSession = Depends(user_session),
    ) -> dict[str, object]:
        """Log the same drink again."""
        existing = _resolve_drink_log(session.drink_logs, drink_log_id, drink)
        notification = await session.drink_entry_service.relog(existing)
        return _form_result(notification)

    @app.delete("/drinks/log/{drink_log_id}")
    async def delete_drink(
        drink_log_id: int, session: UserSession = Depends(user_session)
    ) -> dict[str, object]:
        """Delete a drink log."""
        notification = await session.drink_entry_service.delete(drink_log_id)
        return _form_result(notification)

    @app.get("/bac/current")
    async def current_bac(
        session: UserSession = Depends(user_session),
    ) -> dict[str, object]:
        """Return the current BAC estimate."""
        current = await session.bac_service.get_current()
        return {"current": asdict(current) if current else None}

    @app.get("/bac/timeline")
    async def bac_timeline(
        session: UserSession = Depends(user_session),
    ) -> dict[str, object]:
        """Return the BAC timeline chart."""
        view = await session.bac_service.get_timeline()
        return {"timeline": asdict(view) if view else None}

    @app.get("/analytics/trends")
    async def drinking_trends(
        days: int = Query(90, ge=1, le=MAX_TREND_DAYS),
        session: UserSession = Depends(user_session),
    ) -> dict[str, object]:
        """Return daily drink totals for the chart."""
        points = await session.analytics_service.get_drinking_trends(days=days)
        return {
            "trends": [
                {**asdict(point), "date": point.date.isoformat()} for point in points
            ]
        }

    @app.get("/analytics/sobriety")
    async def sobriety_dashboard(
        months: int = Query(6, ge=1, le=MAX_DASHBOARD_MONTHS),
        session: UserSession = Depends(user_session),
    ) -> dict[str, object]:
        """Return monthly sober/light/heavy day counts."""
        dashboard = await session.analytics_service.get_sobriety_dashboard(
            months=months
        )
        return asdict(dashboard)

    @app.get("/analytics/sobriety/current")
    async def sobriety_stats(
        session: UserSession = Depends(user_session),
    ) -> dict[str, object]:
        """Return sober days for the latest month."""
        stats = await session.analytics_service.get_sobriety_stats()
        return asdict(stats)

    @app.get("/profile")
    async def profile(
        session: UserSession = Depends(user_session),
    ) -> dict[str, object]:
        """Return the profile form values."""
        current = await session.profile_service.get_profile()
        return {"profile": asdict(current) if current else None}

    @app.put("/profile")
    async def update_profile(
        form: ProfileForm, session: UserSession = Depends(user_session)
    ) -> dict[str, object]:
        """Save the profile form."""
        notification = await session.profile_service.update_profile(
            form.gender, form.weight_kg
        )
        return _form_result(notification)

    return app


def _form_result(notification: Notification) -> dict[str, object]:
    """Wrap a notification in the form response envelope."""
    return {
        "status": "ok" if notification.level == "success" else "error",
        "notification": asdict(notification),
    }


def _history_view(store: DrinkLogStore) -> dict[str, object]:
    """Serialize the drink log store for the history page."""
    return {
        "days": [
            {
                "date": day.date,
                "drink_count": day.drink_count,
                "standard_drinks": day.standard_drinks,
                "drinks": [asdict(drink) for drink in day.drinks],
            }
            for day in store.daily_stats
        ],
        "total_logs": len(store.drink_logs),
        "current_page": store.current_page,
        "has_more_logs": store.has_more_logs,
    }


def _resolve_drink_log(
    store: DrinkLogStore, drink_log_id: int, shown: DrinkLogSnapshot | None
) -> DrinkLog:
    """Return the drink as the user saw it, falling back to the loaded logs."""
    if shown is not None:
        if shown.id != drink_log_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Drink id does not match the URL",
            )
        return shown.to_drink_log()
    for drink in store.drink_logs:
        if drink.id == drink_log_id:
            return drink
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
