from django.db import models
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager


class Role(models.TextChoices):
    ADMIN = "ADMIN", "Admin"
    SUPERVISOR = "SUPERVISOR", "Supervisor"
    INTERN = "INTERN", "Intern"


class User(AbstractBaseUser):
    company = models.ForeignKey(
        "company.Company",
        on_delete=models.CASCADE,
        related_name="users",
    )
    full_name = models.CharField(max_length=150)
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=Role.choices)

    domain = models.CharField(max_length=100, blank=True, null=True)
    start_date = models.DateTimeField(blank=True, null=True)
    end_date = models.DateTimeField(blank=True, null=True)

    # Set only for interns; reverse side lists a supervisor's interns
    supervisor = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="supervisees",
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = BaseUserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["full_name", "role"]

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["company", "role"], name="user_company_role_idx"),
        ]

    def __str__(self):
        return f"{self.full_name} <{self.email}> - ({self.role})"
