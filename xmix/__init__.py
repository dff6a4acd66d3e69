"""
xmix - Remote control of Behringer/Midas digital mixers over OSC.

Modules:
    osc: OSC codec wrappers, constants, validation, message statistics
    transport: Single UDP endpoint with inbound reply dispatch
    correlator: Matches outbound queries to their single inbound reply
    detector: X32 / X-Air family detection
    families: Per-family address tables and index ranges
    encoding: Human value <-> wire value conversions
    translator: Logical operation to wire address and value
    keepalive: Periodic /xremote subscription renewal
    scenes: Scene recall, save and naming
    client: MixerClient, the top-level async API
    config: YAML + environment configuration
    cli: Command-line diagnostics
    simulator: Mixer emulator for tests and offline development
"""

__version__ = "0.1.0"

# Note: Modules are imported on-demand so `python -m xmix` stays light.
# Use: from xmix.client import MixerClient
