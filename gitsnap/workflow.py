"""
Rendering of the GitHub Actions workflow that produces the backups.

The workflow archives the full repository (all branches and tags, including
``.git``) and copies it to the backup bucket under the keys described in
``gitsnap.partition``. The shell snippet below must produce the same layout;
``tests/test_workflow.py`` pins the two together.
"""
from __future__ import annotations

from typing import Any, Dict

import yaml

from .config import DeploymentConfig

ARCHIVE_BASENAME = "repo-backup"

FETCH_BRANCHES_SCRIPT = """\
git fetch --all --force
git fetch --tags --force

echo "Remote branches found:"
git branch -r

echo "Creating local tracking branches..."
git branch -r | grep -v '\\->' | while read remote; do
  branch_name=$(echo "$remote" | sed 's|origin/||')
  if [ "$branch_name" != "HEAD" ]; then
    git branch --track "$branch_name" "$remote" || echo "Already exists: $branch_name"
  fi
done

echo "Local branches created:"
git branch
"""

GIT_IDENTITY_SCRIPT = """\
git config --global user.name "GitHub Actions"
git config --global user.email "actions@github.com"
"""

BACKUP_SCRIPT_TEMPLATE = """\
# Single capture instant so daily and weekly keys share every component
NOW=$(date -u +%s)
TIMESTAMP=$(date -u -d "@$NOW" +%Y%m%d%H%M%S)
YEAR=$(date -u -d "@$NOW" +%Y)
MONTH=$(date -u -d "@$NOW" +%m)
DAY=$(date -u -d "@$NOW" +%d)
WEEKDAY=$(date -u -d "@$NOW" +%A)

7z a {archive} .

DAILY_PATH="daily/$YEAR/$MONTH/$DAY/$TIMESTAMP.{extension}"
aws s3 cp {archive} "s3://{bucket}/$DAILY_PATH" --storage-class {storage_class}

if [ "$WEEKDAY" = "{weekly_day}" ]; then
  WEEKLY_PATH="weekly/$YEAR/$MONTH/$DAY/$TIMESTAMP.{extension}"
  aws s3 cp {archive} "s3://{bucket}/$WEEKLY_PATH" --storage-class {storage_class}
fi
"""


class _WorkflowDumper(yaml.SafeDumper):
    """Multi-line strings become literal blocks, which GitHub renders readably."""


def _represent_str(dumper: yaml.SafeDumper, value: str):
    if "\n" in value:
        return dumper.represent_scalar("tag:yaml.org,2002:str", value, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", value)


_WorkflowDumper.add_representer(str, _represent_str)


def workflow_definition(config: DeploymentConfig, role_arn: str, region: str, bucket: str) -> Dict[str, Any]:
    archive = f"{ARCHIVE_BASENAME}.{config.archive_extension}"
    backup_script = BACKUP_SCRIPT_TEMPLATE.format(
        archive=archive,
        extension=config.archive_extension,
        bucket=bucket,
        storage_class=config.storage_class.value,
        weekly_day=config.weekly_day,
    )
    return {
        "name": "GitSnap - Regular Scheduled Backup",
        "on": {
            "schedule": [{"cron": config.schedule_cron}],
            "workflow_dispatch": None,
        },
        "jobs": {
            "backup": {
                "runs-on": "ubuntu-latest",
                "permissions": {"id-token": "write", "contents": "read"},
                "steps": [
                    {
                        "name": "Checkout Repository",
                        "uses": "actions/checkout@v4",
                        "with": {"fetch-depth": 0},
                    },
                    {
                        "name": "Fetch All Branches and Tags and Create Local Tracking Branches",
                        "run": FETCH_BRANCHES_SCRIPT,
                    },
                    {
                        "name": "Configure AWS Credentials",
                        "uses": "aws-actions/configure-aws-credentials@v4",
                        "with": {"role-to-assume": role_arn, "aws-region": region},
                    },
                    {"name": "Set up Git", "run": GIT_IDENTITY_SCRIPT},
                    {"name": "Create Repository Backup", "run": backup_script},
                    {"name": "Clean up", "run": f"rm -f {archive}\n"},
                ],
            }
        },
    }


def render_workflow(config: DeploymentConfig, role_arn: str, region: str, bucket: str) -> str:
    return yaml.dump(
        workflow_definition(config, role_arn, region, bucket),
        Dumper=_WorkflowDumper,
        sort_keys=False,
        default_flow_style=False,
        width=120,
    )
