"""API routes for Couple Resolve."""
from fastapi import APIRouter, Depends

from app.models import (
    ErrorResponse,
    SessionCreate,
    SessionJoin,
    SessionResponse,
    SolutionRequest,
    SolutionResponse,
    utc_now,
)
from app.services import (
    SessionService,
    SolutionService,
    session_service,
    solution_service,
)


router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def get_session_service() -> SessionService:
    return session_service


def get_solution_service() -> SolutionService:
    return solution_service


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": utc_now().isoformat()}


@router.post(
    "/api/sessions",
    response_model=SessionResponse,
    status_code=201,
    responses=ERROR_RESPONSES,
)
async def create_session(
    request: SessionCreate,
    sessions: SessionService = Depends(get_session_service),
):
    """
    Open a session with partner 1's perspective.

    If no session_code is given the server picks one.
    """
    session = sessions.create(request)
    return SessionResponse.from_session(session)


@router.get(
    "/api/sessions/{session_code}",
    response_model=SessionResponse,
    responses=ERROR_RESPONSES,
)
async def get_session(
    session_code: str,
    sessions: SessionService = Depends(get_session_service),
):
    """Get a session by its code."""
    return SessionResponse.from_session(sessions.require(session_code))


@router.post(
    "/api/sessions/{session_code}/join",
    response_model=SessionResponse,
    responses=ERROR_RESPONSES,
)
async def join_session(
    session_code: str,
    request: SessionJoin,
    sessions: SessionService = Depends(get_session_service),
):
    """Add partner 2's perspective to an open session."""
    return SessionResponse.from_session(sessions.join(session_code, request))


@router.post(
    "/api/generate-solution",
    response_model=SolutionResponse,
    responses=ERROR_RESPONSES,
)
async def generate_solution(
    request: SolutionRequest,
    solutions: SolutionService = Depends(get_solution_service),
):
    """
    Return the mediation for a session, generating it on first request.

    Once a solution is stored it is returned as-is and the model is not
    called again.
    """
    solution = await solutions.generate(request.session_code)
    return SolutionResponse(solution=solution)
