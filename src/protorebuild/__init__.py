"""protorebuild - rebuild protos that changed relative to a base revision."""

__version__ = "0.1.0"
