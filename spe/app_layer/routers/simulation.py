"""
Simulation API endpoints.
"""

from fastapi import APIRouter, Depends

from spe.app_layer.dependencies import get_simulation_engine
from spe.app_layer.schemas import SimulateRequest, SimulateResponse
from spe.simulation_layer.engine import SimulationEngine

router = APIRouter()


@router.post("/run", response_model=SimulateResponse)
def run_simulation(
    request: SimulateRequest,
    engine: SimulationEngine = Depends(get_simulation_engine),
):
    """Greedy routing simulation for one cycle day, plus the optimizer result when available."""
    result = engine.run(request.scenario, request.day)
    return SimulateResponse(
        vroom_input=result.optimizer_input.to_dict(),
        vroom_output=result.optimizer_output,
        stats=result.stats.to_dict(),
        vector=result.vector,
    )
