import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from interview_review.api.routes.coverage import router as coverage_router
from interview_review.api.routes.report import router as report_router
from interview_review.api.routes.transcript import router as transcript_router
from interview_review.config import settings

app = FastAPI(
    title="Interview Review API",
    description="Evidence-linked interview scorecards with calibrated recommendations",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
    ],
    allow_origin_regex=r"http://localhost:\d+",
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(report_router)
app.include_router(coverage_router)
app.include_router(transcript_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


def run() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
