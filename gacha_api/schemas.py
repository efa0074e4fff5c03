from typing import Optional

from pydantic import BaseModel, Field

from gacha_api.drop_engine import DrawMode
from gacha_api.import_rules import SIMULATION_LIMIT

# -----------------------------
# REQUESTER REGISTRATION
# -----------------------------

class RegisterRequest(BaseModel):
    currency: Optional[int] = Field(
        default=None,
        description="Starting coins. Defaults to the configured starting currency."
    )


# -----------------------------
# SIMULATION REQUEST
# -----------------------------

class SimulationRequest(BaseModel):
    simulations: int = Field(
        default=1000,
        ge=1,
        le=SIMULATION_LIMIT,
        description="Number of simulated draws. Max: 100,000"
    )
    seed: Optional[int] = Field(
        default=None,
        description="Optional RNG seed. Same seed always produces the same draws."
    )
    mode: Optional[DrawMode] = Field(
        default=None,
        description="Draw mode to simulate. Defaults to the picker's configured mode."
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "simulations": 10000,
                "seed": 1,
                "mode": "cumulative"
            }
        }
    }
