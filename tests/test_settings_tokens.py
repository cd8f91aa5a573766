"""
Tests for scheduling/settings.py and scheduling/tokens.py
"""

import re
import unittest
from datetime import date

from scheduling.settings import SchedulingSettings, normalize_service_key
from scheduling.tokens import TokenGenerator


class TestSchedulingSettings(unittest.TestCase):

    def setUp(self):
        self.settings = SchedulingSettings.from_config()

    def test_defaults(self):
        self.assertEqual(self.settings.buffer_minutes, 10)
        self.assertEqual(self.settings.pending_time_limit_minutes, 120)
        self.assertEqual(self.settings.sweep_interval_minutes, 15)
        self.assertEqual(self.settings.token_prefixes["walkin"], "WALKIN")

    def test_service_duration_lookup(self):
        self.assertEqual(normalize_service_key("  Haircut and   Beard "), "haircut-and-beard")
        self.assertEqual(self.settings.duration_for("Haircut and Beard"), 45)
        self.assertEqual(self.settings.duration_for("coloring"), 90)

    def test_unknown_service_falls_back_to_default(self):
        self.assertEqual(self.settings.duration_for("hot towel ritual"), 30)

    def test_settings_are_read_only(self):
        with self.assertRaises(Exception):
            self.settings.buffer_minutes = 0
        with self.assertRaises(TypeError):
            self.settings.service_durations["haircut"] = 5

    def test_from_mapping(self):
        settings = SchedulingSettings.from_config({"BUFFER_MINUTES": "20", "SERVICE_DURATIONS": {"trim": 10}})
        self.assertEqual(settings.buffer_minutes, 20)
        self.assertEqual(settings.duration_for("Trim"), 10)


class TestTokenGenerator(unittest.TestCase):

    def setUp(self):
        self.tokens = TokenGenerator(SchedulingSettings.from_config())

    def test_appointment_token_format(self):
        token = self.tokens.generate("appointment", "2030-01-15")
        self.assertRegex(token, r"^APPT-20300115-[0-9A-F]{4}$")

    def test_walk_in_token_accepts_date_objects(self):
        token = self.tokens.generate("walkin", date(2030, 1, 15))
        self.assertTrue(re.match(r"^WALKIN-20300115-[0-9A-F]{4}$", token))

    def test_unknown_kind(self):
        with self.assertRaises(ValueError):
            self.tokens.generate("vip", "2030-01-15")

    def test_custom_delimiter(self):
        settings = SchedulingSettings.from_config({"TOKEN_DELIMITER": "_"})
        token = TokenGenerator(settings).generate("appointment", "2030-01-15")
        self.assertTrue(token.startswith("APPT_20300115_"))
