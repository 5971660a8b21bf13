"""
Synapse formation between growing arbors.

- SynapseRegistry: deduplicated cell-to-cell edge bookkeeping
- SynapseDetector / SynapseFormation: closest cross-cell neighbour search
- TimingGate: attaches detection in the final steps of a run
"""

from synaptogen.synapses.registry import SynapseRegistry
from synaptogen.synapses.detector import DetectionResult, SynapseDetector, SynapseFormation
from synaptogen.synapses.timing import TimingGate, install_synapse_formation

__all__ = [
    "SynapseRegistry",
    "DetectionResult",
    "SynapseDetector",
    "SynapseFormation",
    "TimingGate",
    "install_synapse_formation",
]
