# inspection/defects.py

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

SEVERITIES = ("Red", "Yellow", "Green")


@dataclass(frozen=True)
class Defect:
    id: str
    title: str
    code: str
    severity: str           # Red / Yellow / Green
    severity_score: int     # 1..5
    type: str
    causes: Tuple[str, ...]
    actions: Tuple[str, ...]

    def context(self) -> "DefectContext":
        return DefectContext(code=self.code, name=self.title, severity=self.severity)


@dataclass(frozen=True)
class DefectContext:
    """Defect metadata an inspected item is recorded against."""
    code: str = ""
    name: str = ""
    severity: str = ""


CATALOG: Dict[str, Defect] = {
    d.id: d
    for d in (
        Defect("crack", "Crack", "DC-CRK", "Red", 3, "Fracture / Separation",
               ("Excessive Stress", "Sharp Corners", "Material shrinkage"),
               ("Inspect mold/cavity", "Isolate batch", "Check cooling lines")),
        Defect("flash", "Flash", "DC-FL", "Yellow", 2, "Excess Metal at Parting Line",
               ("Low clamp tonnage", "Die mismatch/wear", "High injection pressure"),
               ("Increase clamp force", "Rework parting surfaces", "Tune shot pressure/timing")),
        Defect("pinhole", "Pin Hole", "DC-PH", "Yellow", 2, "Gas Porosity (Micro-voids)",
               ("Poor venting", "High melt temp / gas pickup", "Turbulent fill"),
               ("Improve venting/vacuum", "Degas alloy, tune temps", "Smooth shot profile")),
        Defect("damage", "Damage", "DC-DMG", "Red", 4, "Mechanical Handling Damage",
               ("Impact during conveyance", "Trim/ejector marks", "Rack/fixture abrasion"),
               ("Protect dunnage", "Polish ejectors/trim", "Revise handling SOP")),
        Defect("sink", "Sink", "DC-SNK", "Yellow", 2, "Surface Depression / Local Shrink",
               ("Thick sections", "Early gate freeze", "Non-uniform cooling"),
               ("Increase hold pressure/time", "Add ribs/cores", "Add/retune cooling")),
        Defect("scratch", "Scratch", "DC-SCR", "Green", 1, "Surface Mar / Abrasion",
               ("Rough handling", "Ejector drag", "Deburr media contact"),
               ("Protect surfaces", "Polish/alignment of ejectors", "Adjust deburr media/time")),
        Defect("coldshut", "Cold Shut", "DC-CS", "Red", 4, "Fronts Non-fusion / Cold Lap",
               ("Low melt/die temp", "Slow injection", "Poor gate/runner or venting"),
               ("Raise melt/die temp", "Increase shot speed", "Redesign gate/vent/overflow")),
        Defect("blister", "Blister", "DC-BLS", "Yellow", 2, "Gas Expansion / Sub-surface Porosity",
               ("Entrapped gas outgassing", "Surface contaminants", "Shallow porosity"),
               ("Pre-bake parts", "Improve cleaning", "Reduce porosity upstream")),
    )
}


def get_defect(defect_id: str) -> Optional[Defect]:
    return CATALOG.get((defect_id or "").strip().lower())

