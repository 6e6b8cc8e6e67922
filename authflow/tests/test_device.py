import unittest
from unittest.mock import patch

from authflow.services.device import generate_device_fingerprint, get_device_info


class TestDeviceInfo(unittest.TestCase):
    def test_caller_device_id_is_kept(self):
        info = get_device_info("device-42")
        self.assertEqual(info["deviceId"], "device-42")
        for key in ("platform", "osVersion", "appVersion", "model"):
            self.assertTrue(info[key])

    @patch("authflow.services.device.platform.node", return_value="host-a")
    def test_fingerprint_is_stable_per_host(self, mock_node):
        first = get_device_info()["deviceId"]
        self.assertEqual(get_device_info()["deviceId"], first)
        self.assertEqual(len(first), 64)

        mock_node.return_value = "host-b"
        self.assertNotEqual(get_device_info()["deviceId"], first)

    def test_fingerprint_ignores_key_order(self):
        self.assertEqual(
            generate_device_fingerprint({"a": 1, "b": 2}),
            generate_device_fingerprint({"b": 2, "a": 1})
        )


if __name__ == '__main__':
    unittest.main()
