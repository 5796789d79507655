import time

from whattheport.config import load_config
from whattheport.monitor import PortMonitor
from whattheport.utils import format_entry


def main() -> None:
    config = load_config()
    monitor = PortMonitor.from_config(config)

    t0 = time.perf_counter()
    first = monitor.refresh()
    first_elapsed = time.perf_counter() - t0
    print(f"first scan: {first_elapsed:.3f}s, ports={len(first.ports)}, source={config.socket_source}")

    t1 = time.perf_counter()
    second = monitor.refresh()
    second_elapsed = time.perf_counter() - t1
    print(f"second scan: {second_elapsed:.3f}s, started={len(second.started)}, stopped={len(second.stopped)}")

    for entry in second.ports:
        print(f"  {format_entry(entry)}  pid={entry.pid} cwd={entry.working_dir or '-'}")


if __name__ == "__main__":
    main()
