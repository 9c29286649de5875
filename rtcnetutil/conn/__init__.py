"""Connection interfaces with in-memory, bridge, UDP socket and UDP listener implementations."""