import datetime
from dataclasses import dataclass, field

from rich.pretty import pprint

from commandant import *


@dataclass
class Deploy:
    target: str = field(default="staging", metadata={"cmd": "`environment` to deploy to"})
    replicas: uint32 = field(default=2, metadata={"cmd": "number of instances"})
    timeout: datetime.timedelta = field(default=datetime.timedelta(seconds=90), metadata={"cmd": "give up after"})
    dry: bool = field(default=False, metadata={"cmd": "print the plan only"})
    token: str = field(default="", metadata={"cmd": "-"})

    def plan(self):
        pprint(self)

    def run(self):
        if self.dry:
            return self.plan()
        print("deploying %d replica(s) to %s" % (self.replicas, self.target))


if __name__ == '__main__':
    commanderize(Deploy(), shell=True)
