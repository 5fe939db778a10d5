from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError

import costs
import database
import users
from errors import ApiError
from log import get_logger, init_logging
from schemas import CostCreate, MonthlyReport, TeamMember, UserCreate, UserDetails
from settings import get_settings

LOGGER = get_logger(__name__)

TEAM = [
    {"first_name": "Ofek", "last_name": "Drihan"},
    {"first_name": "Ziv", "last_name": "Katzir"},
]


@asynccontextmanager
async def lifespan(_: FastAPI):
    settings = get_settings()
    init_logging(settings.log_level)
    database.ensure_indexes(database.get_db())
    LOGGER.info("Connected to database %s", settings.database_name)
    yield
    database.get_client().close()


app = FastAPI(title="Cost Manager API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error responses

@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    LOGGER.warning("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.error)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        f"{'.'.join(str(part) for part in err['loc'] if part != 'body')}: {err['msg']}"
        for err in exc.errors()
    ]
    LOGGER.warning("%s %s -> 400 malformed request", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation failed", "details": details},
    )


@app.exception_handler(PyMongoError)
async def storage_error_handler(request: Request, exc: PyMongoError):
    LOGGER.exception("Storage failure on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "message": str(exc)},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    LOGGER.exception("Unexpected failure on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "message": str(exc)},
    )


@app.get("/")
def read_root():
    return {"message": "Cost Manager Backend is running"}


@app.get("/test")
def test_database(db: Database = Depends(database.get_db)):
    response = {
        "backend": "Running",
        "database": "Not Available",
        "database_name": get_settings().database_name,
        "collections": [],
    }
    try:
        response["collections"] = db.list_collection_names()[:10]
        response["database"] = "Connected & Working"
    except PyMongoError as e:
        response["database"] = f"Error: {str(e)[:50]}"
    return response


# Costs

@app.post("/api/add", status_code=status.HTTP_201_CREATED)
def add_cost(cost: CostCreate, db: Database = Depends(database.get_db)):
    return costs.add_cost(db, cost)


@app.get("/api/report", response_model=MonthlyReport)
def get_report(
    id: Optional[str] = None,
    year: Optional[str] = None,
    month: Optional[str] = None,
    db: Database = Depends(database.get_db),
):
    return costs.monthly_report(db, id, year, month)


# Users

@app.get("/api/about", response_model=List[TeamMember])
def get_developers():
    return TEAM


@app.post("/api/users/adduser", status_code=status.HTTP_201_CREATED)
def create_user(user: UserCreate, db: Database = Depends(database.get_db)):
    return users.create_user(db, user)


@app.get("/api/users/{user_id}", response_model=UserDetails)
def get_user_details(user_id: str, db: Database = Depends(database.get_db)):
    return users.get_user_details(db, user_id)


@app.post("/api/users/{user_id}/recompute", response_model=UserDetails)
def recompute_user_total(user_id: str, db: Database = Depends(database.get_db)):
    return users.recompute_total_costs(db, user_id)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
