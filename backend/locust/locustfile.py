"""
Locust load test for admission under contention.

Point it at one pre-seeded event with a small capacity (events are owned by
the event-management service, so seed the row yourself) and let many users
race for the seats while others cancel:

  LOCUST_EVENT_ID=1 locust -f locustfile.py --tags contention -u 200 -r 50 --run-time 60s
  LOCUST_EVENT_ID=1 locust -f locustfile.py --tags reads      -u 100 -r 20 --run-time 60s

Tokens are minted with the service's SECRET_KEY, so run with the same env.

After the run, verify the capacity invariant:
  SELECT COUNT(*) FROM registrations
   WHERE event_id = :id AND status IN ('registered', 'attended');
must be <= the event's capacity, and if it is below capacity there must be
no rows with status = 'waitlist'.
"""

import itertools
import os
import random

from locust import HttpUser, task, between, tag

from eventgate.core.security import create_access_token

EVENT_ID = int(os.environ.get("LOCUST_EVENT_ID", "1"))
_user_ids = itertools.count(int(os.environ.get("LOCUST_FIRST_USER_ID", "10000")))

# 2xx admissions and 4xx rejections are both correct answers under contention
EXPECTED_REGISTER = {201, 202, 409}
EXPECTED_CANCEL = {200, 404}


class ContentionUser(HttpUser):
    """Registers, sometimes cancels, and re-registers: every path takes the event lock."""

    wait_time = between(0, 0.2)

    def on_start(self):
        self.user_id = next(_user_ids)
        token = create_access_token(data={"sub": str(self.user_id)})
        self.headers = {"Authorization": f"Bearer {token}"}
        self.path = f"/api/v1/events/{EVENT_ID}/registrations"

    @tag("contention")
    @task(3)
    def register(self):
        with self.client.post(self.path, headers=self.headers, name="register", catch_response=True) as resp:
            if resp.status_code in EXPECTED_REGISTER:
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    @tag("contention")
    @task(1)
    def cancel(self):
        if random.random() > 0.5:
            return
        with self.client.delete(f"{self.path}/me", headers=self.headers, name="cancel", catch_response=True) as resp:
            if resp.status_code in EXPECTED_CANCEL:
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    @tag("reads")
    @task(2)
    def my_status(self):
        self.client.get(f"{self.path}/me", headers=self.headers, name="my_registration")


class SummaryReader(HttpUser):
    """Polls the cached summary the way event pages do."""

    wait_time = between(0.1, 0.5)

    @tag("reads")
    @task
    def summary(self):
        self.client.get(f"/api/v1/events/{EVENT_ID}/summary", name="summary")
