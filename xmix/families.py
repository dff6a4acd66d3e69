"""
Mixer family profiles.

Two incompatible OSC dialects are spoken by otherwise similar hardware:

    X32   - X32/M32 consoles. /info, /main/st, padded bus indices,
            scenes stored from index 0 with per-index name addresses.
    X-Air - XR12/XR16/XR18/MR18 racks. /xinfo, /lr, unpadded bus and fx
            indices, scenes from index 1, only the active scene's name.

Everything that differs between them lives in the two FamilyProfile tables
below. Adding a family means adding a table, not touching the translator.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional

from xmix import encoding
from xmix.encoding import EncodingRule
from xmix.osc import PORT_X32, PORT_XAIR


class MixerFamily(Enum):
    UNKNOWN = "unknown"
    X32 = "x32"
    XAIR = "x-air"


class Operation(Enum):
    """Logical operations, independent of the wire dialect."""
    # Channel strip
    CHANNEL_FADER = "channel_fader"
    CHANNEL_MUTE = "channel_mute"
    CHANNEL_PAN = "channel_pan"
    CHANNEL_NAME = "channel_name"
    CHANNEL_COLOR = "channel_color"
    CHANNEL_SOURCE = "channel_source"
    LOW_CUT_ON = "low_cut_on"
    LOW_CUT = "low_cut"
    # EQ
    EQ_GAIN = "eq_gain"
    EQ_FREQUENCY = "eq_frequency"
    EQ_Q = "eq_q"
    EQ_TYPE = "eq_type"
    EQ_ON = "eq_on"
    # Dynamics
    GATE_THRESHOLD = "gate_threshold"
    GATE_RANGE = "gate_range"
    GATE_ATTACK = "gate_attack"
    GATE_HOLD = "gate_hold"
    GATE_RELEASE = "gate_release"
    GATE_ON = "gate_on"
    COMP_THRESHOLD = "comp_threshold"
    COMP_RATIO = "comp_ratio"
    COMP_ATTACK = "comp_attack"
    COMP_RELEASE = "comp_release"
    COMP_KNEE = "comp_knee"
    COMP_GAIN = "comp_gain"
    COMP_ON = "comp_on"
    # Buses and sends
    BUS_FADER = "bus_fader"
    BUS_MUTE = "bus_mute"
    BUS_PAN = "bus_pan"
    BUS_NAME = "bus_name"
    SEND_LEVEL = "send_level"
    FX_SEND = "fx_send"
    # Console-only strips
    AUX_FADER = "aux_fader"
    AUX_MUTE = "aux_mute"
    MATRIX_FADER = "matrix_fader"
    MATRIX_MUTE = "matrix_mute"
    # Main mix
    MAIN_FADER = "main_fader"
    MAIN_MUTE = "main_mute"
    MAIN_PAN = "main_pan"
    # Effects
    FX_ON = "fx_on"
    FX_MIX = "fx_mix"
    FX_PARAM = "fx_param"
    # Scenes
    SCENE_LOAD = "scene_load"
    SCENE_SAVE = "scene_save"
    SCENE_NAME = "scene_name"
    SCENE_INDEX = "scene_index"


@dataclass(frozen=True)
class IndexSpec:
    """How a 1-based human index becomes an address segment or argument.

    Attributes:
        limit: Highest valid human index
        width: Zero-padding width in addresses (0 = unpadded)
        base: Wire index of human index 1
    """
    limit: int
    width: int = 0
    base: int = 1

    def wire(self, index: int) -> int:
        return index - 1 + self.base

    def segment(self, index: int) -> str:
        value = str(self.wire(index))
        return value.zfill(self.width) if self.width else value


@dataclass(frozen=True)
class RouteTemplate:
    """Address template plus value rule; fields are IndexSpec names."""
    path: str
    rule: EncodingRule


@dataclass(frozen=True)
class FamilyProfile:
    family: MixerFamily
    display_name: str
    info_address: str
    default_port: int
    indices: Mapping[str, IndexSpec]
    routes: Mapping[Operation, Optional[RouteTemplate]] = field(default_factory=dict)
    # True when every stored scene has its own name address
    indexed_scene_names: bool = False

    def limit(self, domain: str) -> int:
        index_spec = self.indices.get(domain)
        return index_spec.limit if index_spec else 0

    def supports(self, operation: Operation) -> bool:
        return self.routes.get(operation) is not None


# Rule used for an operation's placeholder when a family has no route for it
OPERATION_RULES: Dict[Operation, EncodingRule] = {
    Operation.CHANNEL_FADER: encoding.FADER,
    Operation.CHANNEL_MUTE: encoding.MUTE,
    Operation.CHANNEL_PAN: encoding.PAN,
    Operation.CHANNEL_NAME: encoding.TEXT,
    Operation.CHANNEL_COLOR: encoding.COLOR,
    Operation.CHANNEL_SOURCE: encoding.XAIR_SOURCE,
    Operation.LOW_CUT_ON: encoding.ON_OFF,
    Operation.LOW_CUT: encoding.LOW_CUT,
    Operation.EQ_GAIN: encoding.EQ_GAIN,
    Operation.EQ_FREQUENCY: encoding.FREQUENCY,
    Operation.EQ_Q: encoding.NORMALIZED,
    Operation.EQ_TYPE: encoding.EQ_TYPE,
    Operation.EQ_ON: encoding.ON_OFF,
    Operation.GATE_THRESHOLD: encoding.GATE_THRESHOLD,
    Operation.GATE_RANGE: encoding.NORMALIZED,
    Operation.GATE_ATTACK: encoding.NORMALIZED,
    Operation.GATE_HOLD: encoding.NORMALIZED,
    Operation.GATE_RELEASE: encoding.NORMALIZED,
    Operation.GATE_ON: encoding.ON_OFF,
    Operation.COMP_THRESHOLD: encoding.COMP_THRESHOLD,
    Operation.COMP_RATIO: encoding.COMP_RATIO,
    Operation.COMP_ATTACK: encoding.NORMALIZED,
    Operation.COMP_RELEASE: encoding.NORMALIZED,
    Operation.COMP_KNEE: encoding.NORMALIZED,
    Operation.COMP_GAIN: encoding.NORMALIZED,
    Operation.COMP_ON: encoding.ON_OFF,
    Operation.BUS_FADER: encoding.FADER,
    Operation.BUS_MUTE: encoding.MUTE,
    Operation.BUS_PAN: encoding.PAN,
    Operation.BUS_NAME: encoding.TEXT,
    Operation.SEND_LEVEL: encoding.FADER,
    Operation.FX_SEND: encoding.FADER,
    Operation.AUX_FADER: encoding.FADER,
    Operation.AUX_MUTE: encoding.MUTE,
    Operation.MATRIX_FADER: encoding.FADER,
    Operation.MATRIX_MUTE: encoding.MUTE,
    Operation.MAIN_FADER: encoding.FADER,
    Operation.MAIN_MUTE: encoding.MUTE,
    Operation.MAIN_PAN: encoding.PAN,
    Operation.FX_ON: encoding.ON_OFF,
    Operation.FX_MIX: encoding.NORMALIZED,
    Operation.FX_PARAM: encoding.NORMALIZED,
    Operation.SCENE_LOAD: encoding.SCENE_INDEX,
    Operation.SCENE_SAVE: encoding.SCENE_INDEX,
    Operation.SCENE_NAME: encoding.TEXT,
    Operation.SCENE_INDEX: encoding.SCENE_INDEX,
}


def _route(path: str, operation: Operation) -> RouteTemplate:
    return RouteTemplate(path, OPERATION_RULES[operation])


# Routes both dialects share verbatim
_SHARED_ROUTES = {
    Operation.CHANNEL_FADER: _route("/ch/{channel}/mix/fader", Operation.CHANNEL_FADER),
    Operation.CHANNEL_MUTE: _route("/ch/{channel}/mix/on", Operation.CHANNEL_MUTE),
    Operation.CHANNEL_PAN: _route("/ch/{channel}/mix/pan", Operation.CHANNEL_PAN),
    Operation.CHANNEL_NAME: _route("/ch/{channel}/config/name", Operation.CHANNEL_NAME),
    Operation.CHANNEL_COLOR: _route("/ch/{channel}/config/color", Operation.CHANNEL_COLOR),
    Operation.LOW_CUT_ON: _route("/ch/{channel}/preamp/hpon", Operation.LOW_CUT_ON),
    Operation.EQ_GAIN: _route("/ch/{channel}/eq/{band}/g", Operation.EQ_GAIN),
    Operation.EQ_FREQUENCY: _route("/ch/{channel}/eq/{band}/f", Operation.EQ_FREQUENCY),
    Operation.EQ_Q: _route("/ch/{channel}/eq/{band}/q", Operation.EQ_Q),
    Operation.EQ_TYPE: _route("/ch/{channel}/eq/{band}/type", Operation.EQ_TYPE),
    Operation.EQ_ON: _route("/ch/{channel}/eq/on", Operation.EQ_ON),
    Operation.GATE_THRESHOLD: _route("/ch/{channel}/gate/thr", Operation.GATE_THRESHOLD),
    Operation.GATE_RANGE: _route("/ch/{channel}/gate/range", Operation.GATE_RANGE),
    Operation.GATE_ATTACK: _route("/ch/{channel}/gate/attack", Operation.GATE_ATTACK),
    Operation.GATE_HOLD: _route("/ch/{channel}/gate/hold", Operation.GATE_HOLD),
    Operation.GATE_RELEASE: _route("/ch/{channel}/gate/release", Operation.GATE_RELEASE),
    Operation.GATE_ON: _route("/ch/{channel}/gate/on", Operation.GATE_ON),
    Operation.COMP_THRESHOLD: _route("/ch/{channel}/dyn/thr", Operation.COMP_THRESHOLD),
    Operation.COMP_RATIO: _route("/ch/{channel}/dyn/ratio", Operation.COMP_RATIO),
    Operation.COMP_ATTACK: _route("/ch/{channel}/dyn/attack", Operation.COMP_ATTACK),
    Operation.COMP_RELEASE: _route("/ch/{channel}/dyn/release", Operation.COMP_RELEASE),
    Operation.COMP_KNEE: _route("/ch/{channel}/dyn/knee", Operation.COMP_KNEE),
    Operation.COMP_GAIN: _route("/ch/{channel}/dyn/mgain", Operation.COMP_GAIN),
    Operation.COMP_ON: _route("/ch/{channel}/dyn/on", Operation.COMP_ON),
    Operation.BUS_FADER: _route("/bus/{bus}/mix/fader", Operation.BUS_FADER),
    Operation.BUS_MUTE: _route("/bus/{bus}/mix/on", Operation.BUS_MUTE),
    Operation.BUS_PAN: _route("/bus/{bus}/mix/pan", Operation.BUS_PAN),
    Operation.BUS_NAME: _route("/bus/{bus}/config/name", Operation.BUS_NAME),
    Operation.SEND_LEVEL: _route("/ch/{channel}/mix/{send_bus}/level", Operation.SEND_LEVEL),
    Operation.FX_PARAM: _route("/fx/{fx}/par/{param}", Operation.FX_PARAM),
    Operation.SCENE_LOAD: _route("/-snap/load", Operation.SCENE_LOAD),
    Operation.SCENE_INDEX: _route("/-snap/index", Operation.SCENE_INDEX),
}


X32_PROFILE = FamilyProfile(
    family=MixerFamily.X32,
    display_name="X32",
    info_address="/info",
    default_port=PORT_X32,
    indices={
        "channel": IndexSpec(limit=32, width=2),
        "bus": IndexSpec(limit=16, width=2),
        "send_bus": IndexSpec(limit=16, width=2),
        "aux": IndexSpec(limit=8, width=2),
        "matrix": IndexSpec(limit=6, width=2),
        "band": IndexSpec(limit=4),
        "fx": IndexSpec(limit=8),
        "param": IndexSpec(limit=64, width=2),
        "scene": IndexSpec(limit=100, width=3, base=0),
    },
    routes={
        **_SHARED_ROUTES,
        Operation.CHANNEL_SOURCE: RouteTemplate("/ch/{channel}/config/source", encoding.X32_SOURCE),
        Operation.LOW_CUT: RouteTemplate("/ch/{channel}/preamp/hpf", encoding.LOW_CUT_PLAIN),
        Operation.FX_SEND: None,
        Operation.AUX_FADER: _route("/auxin/{aux}/mix/fader", Operation.AUX_FADER),
        Operation.AUX_MUTE: _route("/auxin/{aux}/mix/on", Operation.AUX_MUTE),
        Operation.MATRIX_FADER: _route("/mtx/{matrix}/mix/fader", Operation.MATRIX_FADER),
        Operation.MATRIX_MUTE: _route("/mtx/{matrix}/mix/on", Operation.MATRIX_MUTE),
        Operation.MAIN_FADER: _route("/main/st/mix/fader", Operation.MAIN_FADER),
        Operation.MAIN_MUTE: _route("/main/st/mix/on", Operation.MAIN_MUTE),
        Operation.MAIN_PAN: _route("/main/st/mix/pan", Operation.MAIN_PAN),
        Operation.FX_ON: _route("/fx/{fx}/on", Operation.FX_ON),
        Operation.FX_MIX: None,
        Operation.SCENE_SAVE: _route("/-snap/store", Operation.SCENE_SAVE),
        Operation.SCENE_NAME: _route("/-snap/{scene}/name", Operation.SCENE_NAME),
    },
    indexed_scene_names=True,
)

XAIR_PROFILE = FamilyProfile(
    family=MixerFamily.XAIR,
    display_name="X-Air",
    info_address="/xinfo",
    default_port=PORT_XAIR,
    indices={
        "channel": IndexSpec(limit=16, width=2),
        "bus": IndexSpec(limit=6),
        "send_bus": IndexSpec(limit=6, width=2),
        # FX 1-4 are fed by the internal buses 7-10
        "fx_send": IndexSpec(limit=4, width=2, base=7),
        "band": IndexSpec(limit=4),
        "fx": IndexSpec(limit=4),
        "param": IndexSpec(limit=64, width=2),
        "scene": IndexSpec(limit=64, base=1),
    },
    routes={
        **_SHARED_ROUTES,
        Operation.CHANNEL_SOURCE: RouteTemplate("/ch/{channel}/config/insrc", encoding.XAIR_SOURCE),
        Operation.LOW_CUT: RouteTemplate("/ch/{channel}/preamp/hpf", encoding.LOW_CUT),
        Operation.FX_SEND: _route("/ch/{channel}/mix/{fx_send}/level", Operation.FX_SEND),
        Operation.AUX_FADER: None,
        Operation.AUX_MUTE: None,
        Operation.MATRIX_FADER: None,
        Operation.MATRIX_MUTE: None,
        Operation.MAIN_FADER: _route("/lr/mix/fader", Operation.MAIN_FADER),
        Operation.MAIN_MUTE: _route("/lr/mix/on", Operation.MAIN_MUTE),
        Operation.MAIN_PAN: _route("/lr/mix/pan", Operation.MAIN_PAN),
        Operation.FX_ON: _route("/fx/{fx}/insert", Operation.FX_ON),
        Operation.FX_MIX: _route("/fx/{fx}/mix", Operation.FX_MIX),
        Operation.SCENE_SAVE: _route("/-snap/save", Operation.SCENE_SAVE),
        Operation.SCENE_NAME: _route("/-snap/name", Operation.SCENE_NAME),
    },
)

PROFILES = {
    MixerFamily.X32: X32_PROFILE,
    MixerFamily.XAIR: XAIR_PROFILE,
}

# Probe order at session start: X-Air first, then X32
DETECTION_ORDER = (XAIR_PROFILE, X32_PROFILE)


def profile_for(family: MixerFamily) -> FamilyProfile:
    """Profile for a detected family.

    Raises:
        ValueError: For MixerFamily.UNKNOWN
    """
    try:
        return PROFILES[family]
    except KeyError:
        raise ValueError(f"No profile for mixer family {family.value!r}") from None
