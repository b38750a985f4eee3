from pydantic import BaseModel, ConfigDict
from typing import List, Tuple


class Slot(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: int
    y: int
    w: int
    h: int

    @property
    def box(self) -> Tuple[int, int, int, int]:
        return self.x, self.y, self.x + self.w, self.y + self.h


class Frame(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    src: str
    fill: str = "white"


FRAMES: List[Frame] = [
    Frame(id="ubc", label="UBC", src="UBC.png", fill="#002145"),
    Frame(id="film", label="Film", src="Film.png", fill="#1b1b1b"),
    Frame(id="lights", label="Lights", src="Lights.png", fill="#f6d365"),
    Frame(id="red", label="Red", src="Red.png", fill="#c0392b"),
    Frame(id="white", label="White", src="White.png", fill="white"),
]

# Fill order is list order.
SLOTS: Tuple[Slot, ...] = (
    Slot(x=60, y=60, w=480, h=363),
    Slot(x=60, y=465, w=480, h=363),
    Slot(x=60, y=873, w=480, h=363),
    Slot(x=60, y=1278, w=480, h=363),
)
