from typing import Dict, List

entry_points: Dict[str, List[str]] = {
    "SubCommand": [
        "keys = sshknownhosts.commands.keys:Keys",
        "algorithms = sshknownhosts.commands.algorithms:Algorithms",
        "check = sshknownhosts.commands.check:Check",
        "line = sshknownhosts.commands.line:Line",
    ]
}
