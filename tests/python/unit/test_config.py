import os
import unittest
from pathlib import Path
from unittest.mock import patch

from services.deploy_runner.config import (
    DEFAULT_DEPLOY_COMMAND,
    deploy_command,
    deploy_workdir,
    env_bool,
    env_int,
    forward_params,
)


class TestConfig(unittest.TestCase):
    def test_env_bool(self) -> None:
        with patch.dict(os.environ, {"FLAG": " Yes "}):
            self.assertTrue(env_bool("FLAG"))
        with patch.dict(os.environ, {"FLAG": "0"}):
            self.assertFalse(env_bool("FLAG", True))
        with patch.dict(os.environ, {}, clear=True):
            self.assertTrue(env_bool("FLAG", True))

    def test_env_int_falls_back_on_garbage(self) -> None:
        with patch.dict(os.environ, {"PORT": "abc"}):
            self.assertEqual(env_int("PORT", 3000), 3000)
        with patch.dict(os.environ, {"PORT": "8080"}):
            self.assertEqual(env_int("PORT", 3000), 8080)

    def test_deploy_command_is_shell_split(self) -> None:
        with patch.dict(os.environ, {"DEPLOY_COMMAND": "/opt/deploy 'with space' -v"}):
            self.assertEqual(deploy_command(), ["/opt/deploy", "with space", "-v"])
        with patch.dict(os.environ, {"DEPLOY_COMMAND": "  "}):
            self.assertEqual(deploy_command(), DEFAULT_DEPLOY_COMMAND.split())

    def test_workdir_and_forwarding(self) -> None:
        with patch.dict(
            os.environ, {"DEPLOY_WORKDIR": "/srv/app", "DEPLOY_FORWARD_PARAMS": "off"}
        ):
            self.assertEqual(deploy_workdir(), Path("/srv/app"))
            self.assertFalse(forward_params())
        with patch.dict(os.environ, {}, clear=True):
            self.assertEqual(deploy_workdir(), Path.cwd())
            self.assertTrue(forward_params())
