import os
import random

from locust import HttpUser, task, between


class CatalogVisitor(HttpUser):
    wait_time = between(1, 3)

    def on_start(self):
        # sign-in codes arrive by email, so signed-in runs pass a token in
        token = os.getenv("CATALOG_BENCH_TOKEN")
        self.headers = {"Authorization": f"Bearer {token}"} if token else {}
        abilities = self.client.get("/api/vocabularies/ability").json()
        self.ability_ids = [term["id"] for term in abilities]
        self.entry_ids = []

    @task(4)
    def browse(self):
        r = self.client.get("/api/catalog", headers=self.headers, name="/api/catalog")
        if r.status_code == 200:
            self.entry_ids = [row["id"] for row in r.json()["results"]]

    @task(2)
    def filter_by_ability_and_age(self):
        params = {"age_min": random.choice(["", "5", "18"])}
        if self.ability_ids:
            params["ability"] = random.choice(self.ability_ids)
        self.client.get("/api/catalog", params=params, headers=self.headers, name="/api/catalog?filtered")

    @task(1)
    def open_entry(self):
        if self.entry_ids:
            entry_id = random.choice(self.entry_ids)
            self.client.get(f"/api/entries/{entry_id}", headers=self.headers, name="/api/entries/[id]")
