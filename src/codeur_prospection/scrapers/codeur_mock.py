#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Mock Codeur.com source.

Stands in for the real listing scraper: returns five realistic projects with
recent posting dates after a simulated network delay.
"""

import asyncio
import random
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from codeur_prospection.criteria import SearchCriteria
from codeur_prospection.models import CandidateProject
from codeur_prospection.scrapers.base_scraper import BaseSourceFetcher

# (listing, maximum age in days of its random posting date)
MOCK_LISTINGS: List[Dict[str, Any]] = [
    {
        "max_age_days": 7,
        "title": "Développement d'une application mobile React Native",
        "description": (
            "Nous recherchons un développeur expérimenté pour créer une application "
            "mobile de e-commerce. L'application doit être compatible iOS et Android, "
            "avec intégration de paiement et gestion des commandes."
        ),
        "budget": "5 000 € - 8 000 €",
        "skills": ["React Native", "JavaScript", "API REST", "Firebase"],
        "url": "https://codeur.com/projects/123456",
        "client_info": {"name": "TechStart SAS", "verified": True, "location": "Paris, France"},
    },
    {
        "max_age_days": 5,
        "title": "Refonte complète d'un site web WordPress",
        "description": (
            "Site vitrine existant à moderniser avec nouveau design responsive, "
            "optimisation SEO et intégration CRM. Environ 15 pages à refaire."
        ),
        "budget": "2 500 € - 4 000 €",
        "skills": ["WordPress", "PHP", "CSS", "JavaScript", "SEO"],
        "url": "https://codeur.com/projects/123457",
        "client_info": {"name": "Marketing Plus", "verified": False, "location": "Lyon, France"},
    },
    {
        "max_age_days": 3,
        "title": "Création d'une API REST avec Node.js",
        "description": (
            "Développement d'une API pour une application de gestion de stock. Base de "
            "données PostgreSQL, authentification JWT, documentation Swagger."
        ),
        "budget": "3 000 € - 5 000 €",
        "skills": ["Node.js", "Express", "PostgreSQL", "JWT", "Docker"],
        "url": "https://codeur.com/projects/123458",
        "client_info": {"name": "LogiStock Pro", "verified": True, "location": "Nantes, France"},
    },
    {
        "max_age_days": 2,
        "title": "Intégration de système de paiement Stripe",
        "description": (
            "Ajout du paiement en ligne sur une boutique existante. Gestion des "
            "abonnements, webhooks, et interface d'administration."
        ),
        "budget": "1 500 € - 2 500 €",
        "skills": ["Stripe", "JavaScript", "PHP", "Webhooks"],
        "url": "https://codeur.com/projects/123459",
        "client_info": {"name": "E-Shop France", "verified": True, "location": "Marseille, France"},
    },
    {
        "max_age_days": 4,
        "title": "Développement d'un dashboard analytique",
        "description": (
            "Création d'un tableau de bord pour visualiser les données de vente. "
            "Graphiques interactifs, exports PDF, système de notifications."
        ),
        "budget": "4 000 € - 6 000 €",
        "skills": ["React", "D3.js", "Python", "Django", "PostgreSQL"],
        "url": "https://codeur.com/projects/123460",
        "client_info": {"name": "DataViz Solutions", "verified": True, "location": "Toulouse, France"},
    },
]


class MockCodeurFetcher(BaseSourceFetcher):
    """Fake Codeur.com source returning fixed listings."""

    name = "codeur-mock"

    def __init__(
        self,
        latency_min_seconds: float = 2.0,
        latency_max_seconds: float = 5.0,
        rng: Optional[random.Random] = None,
        **kwargs: Any,
    ):
        """
        Initialize the mock source.

        Args:
            latency_min_seconds: Lower bound of the simulated delay
            latency_max_seconds: Upper bound of the simulated delay
            rng: Random generator for dates and delay (seed it for repeatable runs)
        """
        super().__init__(**kwargs)
        self.latency_min_seconds = latency_min_seconds
        self.latency_max_seconds = max(latency_min_seconds, latency_max_seconds)
        self.rng = rng or random.Random()

    def build_listings(self, now: datetime) -> List[CandidateProject]:
        """Materialize the fixed listings with posting dates relative to ``now``."""
        listings = []
        for listing in MOCK_LISTINGS:
            age = timedelta(days=listing["max_age_days"]) * self.rng.random()
            listings.append(CandidateProject(
                title=listing["title"],
                description=listing["description"],
                budget=listing["budget"],
                skills=list(listing["skills"]),
                posted_date=now - age,
                url=listing["url"],
                client_info=dict(listing["client_info"]),
            ))
        return listings

    async def scrape(self, criteria: SearchCriteria, now: datetime) -> List[CandidateProject]:
        listings = self.build_listings(now)

        # Simulate network delay
        delay = self.rng.uniform(self.latency_min_seconds, self.latency_max_seconds)
        if delay > 0:
            await asyncio.sleep(delay)

        return listings
