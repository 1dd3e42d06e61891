from typing import Dict, List, Optional
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from downpour.api.jobs import JobManager, RunStatus
from downpour.classifier import expect
from downpour.errors import ConfigError
from downpour.models import EndpointConfig, RequestTemplate

app = FastAPI(title="Downpour API", description="API for concurrent endpoint probing runs")

# Enable CORS for frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

job_manager = JobManager()


class RunCreate(BaseModel):
    base_url: str
    endpoint: str = ""
    method: str = "GET"
    headers: Dict[str, str] = {}
    default_headers: Dict[str, str] = {}
    body: str = ""
    concurrency: int = Field(10, ge=1)
    timeout_s: float = Field(30.0, gt=0)
    max_retries: int = Field(3, ge=0)
    expect_status: List[int] = []
    expect_body: Optional[str] = None


@app.post("/api/runs", response_model=dict)
async def create_run(request: RunCreate):
    try:
        config = EndpointConfig(
            base_url=request.base_url,
            concurrency=request.concurrency,
            timeout_s=request.timeout_s,
            max_retries=request.max_retries,
            default_headers=request.default_headers,
        )
        template = RequestTemplate(
            endpoint=request.endpoint,
            method=request.method,
            headers=request.headers,
            body=request.body,
            success_criteria=expect(request.expect_status, request.expect_body),
        )
    except ConfigError as e:
        raise HTTPException(status_code=422, detail=str(e))
    run_id = job_manager.create_run(config, template)
    return {"run_id": run_id}


@app.get("/api/runs", response_model=List[RunStatus])
async def list_runs():
    return job_manager.list_runs()


@app.get("/api/runs/{run_id}", response_model=RunStatus)
async def get_run(run_id: str):
    run = job_manager.get_run(run_id)
    if not run:
        raise HTTPException(status_code=404, detail="Run not found")
    return run


@app.delete("/api/runs/{run_id}")
async def delete_run(run_id: str):
    run = job_manager.get_run(run_id)
    if not run:
        raise HTTPException(status_code=404, detail="Run not found")
    job_manager.delete_run(run_id)
    return {"status": "deleted"}


@app.get("/")
async def read_root():
    return {"message": "Downpour API is running."}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
