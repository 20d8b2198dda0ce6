from dataclasses import dataclass


@dataclass
class Settings:
    target_file: str
    interval: float = 10.0      # seconds between probe cycles
    timeout: float = 5.0        # seconds a batch may wait for replies
    listen: str = ":9010"       # metrics endpoint, "[host]:port"
    privileged: bool = False    # raw ICMP sockets instead of datagram ones

    # console view
    table: bool = False
    ascii: bool = False
    screen: bool = True

    log_level: str = "INFO"
