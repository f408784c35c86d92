from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pathlib import Path
import json
import os

app = FastAPI(title="Mock Loan Book Server", version="1.0.0")
# Support both local development and Docker
DATA_DIR = Path("/loan_book_stub") if os.path.exists("/loan_book_stub") else Path(__file__).resolve().parent / "data"

@app.get("/health")
def health(): return {"status": "ok"}

@app.get("/loans")
def get_loans(tenant_id: str):
    file = DATA_DIR / f"loans_{tenant_id}.json"
    if not file.exists():
        raise HTTPException(status_code=404, detail="tenant not found")
    return JSONResponse(content=json.loads(file.read_text()))
