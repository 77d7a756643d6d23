"""RFB (VNC) protocol toolkit: messages, handshakes, security, a server loop and FBS playback."""

__version__ = "0.1.0"