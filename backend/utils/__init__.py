# Utilities: configuration, geo distance, telemetry sinks
