"""FastAPI server — HTTP access to the calculator registry.

Run with:
    uvicorn laser_engine.api.server:app --reload --port 8000

Or:
    python -m laser_engine.api.server

Endpoints:
    GET  /health                        — liveness probe
    GET  /calculators                   — registered calculators
    GET  /calculators/{id}/schema       — input descriptors + JSON Schema
    GET  /calculators/{id}/defaults     — default inputs
    GET  /calculators/{id}/example      — example inputs
    POST /calculators/{id}/calculate    — run one calculation

``/calculate`` answers 200 with a result, 422 with a validation failure,
500 with an internal failure, and 404 for an unknown calculator id.
"""

from __future__ import annotations

from typing import Any

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from laser_engine import __version__
from laser_engine.engine.registry import get_calculator, list_calculators
from laser_engine.engine.schema import InputDescriptor
from laser_engine.errors import UnknownCalculatorError


# ═══════════════════════════════════════════════════════════════════════════
# App setup
# ═══════════════════════════════════════════════════════════════════════════

app = FastAPI(
    title="Laser Process Engine API",
    version=__version__,
    description=(
        "Derive laser cutting parameters, predict quality, time and cost, and "
        "explain the result. Start with GET /calculators."
    ),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# ═══════════════════════════════════════════════════════════════════════════
# Response models
# ═══════════════════════════════════════════════════════════════════════════

class CalculatorInfo(BaseModel):
    """One registered calculator."""
    id: str
    title: str
    description: str
    version: str


class CalculatorSchema(BaseModel):
    """Response from /calculators/{id}/schema."""
    id: str
    inputs: list[InputDescriptor]
    json_schema: dict[str, Any]


# ═══════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════

_STATUS_BY_FAILURE = {"structural": 422, "domain": 422, "internal": 500}


def _calculator(calculator_id: str):
    """Look up a calculator, mapping an unknown id to 404."""
    try:
        return get_calculator(calculator_id)
    except UnknownCalculatorError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


# ═══════════════════════════════════════════════════════════════════════════
# Endpoints
# ═══════════════════════════════════════════════════════════════════════════

@app.get("/health")
def health_check():
    """Health check for deployment platforms."""
    return {"status": "ok"}


@app.get("/calculators", response_model=list[CalculatorInfo])
def calculators():
    """Every registered calculator, in registration order."""
    infos = []
    for calculator_id in list_calculators():
        calc = get_calculator(calculator_id)
        infos.append(CalculatorInfo(
            id=calc.id, title=calc.title, description=calc.description, version=calc.version,
        ))
    return infos


@app.get("/calculators/{calculator_id}/schema", response_model=CalculatorSchema)
def calculator_schema(calculator_id: str):
    """Input descriptors (for form rendering) plus the full JSON Schema."""
    calc = _calculator(calculator_id)
    return CalculatorSchema(id=calc.id, inputs=calc.describe_inputs(), json_schema=calc.schema())


@app.get("/calculators/{calculator_id}/defaults")
def calculator_defaults(calculator_id: str):
    """Complete default inputs. Use as a starting point for modifications."""
    return _calculator(calculator_id).default_inputs()


@app.get("/calculators/{calculator_id}/example")
def calculator_example(calculator_id: str):
    """A representative, valid set of inputs."""
    return _calculator(calculator_id).example_inputs()


@app.post("/calculators/{calculator_id}/calculate")
def calculate(calculator_id: str, inputs: dict[str, Any] = Body(...)):
    """Validate the inputs and run the calculation.

    Example request for ``gas-pressure``:
    ```json
    {"material_type": "stainless_steel", "thickness": 8, "assist_gas": "nitrogen",
     "nozzle_diameter": 2.0, "cutting_speed": 2000, "laser_power": 1000, "cut_quality": "precision"}
    ```
    """
    outcome = _calculator(calculator_id).calculate(inputs)
    status = 200 if outcome.ok else _STATUS_BY_FAILURE[outcome.kind]
    return JSONResponse(status_code=status, content=outcome.model_dump(mode="json"))


# ═══════════════════════════════════════════════════════════════════════════
# CLI entry point
# ═══════════════════════════════════════════════════════════════════════════

def main():
    """Run the API server."""
    import uvicorn
    uvicorn.run(
        "laser_engine.api.server:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )


if __name__ == "__main__":
    main()
