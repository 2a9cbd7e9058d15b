#accounts/forms.py
from django import forms
from django.contrib.auth import get_user_model
from django.contrib.auth.forms import AuthenticationForm, UserCreationForm

from .models import Profile
from .permissions import is_admin_like

User = get_user_model()

# Widgets Bootstrap styles on its own
_UNSTYLED = (forms.CheckboxInput, forms.CheckboxSelectMultiple, forms.RadioSelect, forms.HiddenInput)


def style_fields(form, placeholders=None):
    """Give every visible widget its Bootstrap class, plus optional placeholders."""
    placeholders = placeholders or {}
    for name, field in form.fields.items():
        widget = field.widget
        if isinstance(widget, _UNSTYLED):
            continue
        css = "form-select" if isinstance(widget, forms.Select) else "form-control"
        classes = widget.attrs.get("class", "").split()
        if css not in classes:
            classes.append(css)
        widget.attrs["class"] = " ".join(classes)
        if name in placeholders:
            widget.attrs.setdefault("placeholder", placeholders[name])


class RegisterForm(UserCreationForm):
    """Sign-up. Players and owners only; admins are appointed from the backoffice."""

    SIGNUP_ROLES = [
        (User.Roles.PLAYER, "I want to book turfs"),
        (User.Roles.OWNER, "I want to list my turf"),
    ]

    full_name = forms.CharField(max_length=150)
    role = forms.ChoiceField(choices=SIGNUP_ROLES, initial=User.Roles.PLAYER, widget=forms.RadioSelect)

    class Meta:
        model = User
        fields = ("username", "email")

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["email"].required = True
        style_fields(self, {
            "username": "Username",
            "email": "Email address",
            "full_name": "Full name",
            "password1": "Password",
            "password2": "Confirm password",
        })
        autocomplete = {"username": "username", "email": "email", "full_name": "name",
                        "password1": "new-password", "password2": "new-password"}
        for name, value in autocomplete.items():
            self.fields[name].widget.attrs["autocomplete"] = value
        self.fields["password1"].help_text = ""

    def clean_email(self):
        email = (self.cleaned_data.get("email") or "").strip().lower()
        if User.objects.filter(email__iexact=email).exists():
            raise forms.ValidationError("This email is already in use.")
        return email

    def save(self, commit=True):
        user = super().save(commit=False)
        user.role = self.cleaned_data["role"]
        if commit:
            user.save()
            # the profile row itself comes from the post_save signal
            Profile.objects.filter(user=user).update(full_name=self.cleaned_data["full_name"].strip())
        return user


class LoginForm(AuthenticationForm):
    """Username or email, same password field as Django's."""

    username = forms.CharField(label="Username or email", max_length=254)

    def __init__(self, request=None, *args, **kwargs):
        super().__init__(request, *args, **kwargs)
        style_fields(self, {"username": "Username or email", "password": "Password"})
        self.fields["username"].widget.attrs.update({"autofocus": True, "autocomplete": "username"})

    def clean_username(self):
        value = (self.cleaned_data.get("username") or "").strip()
        if "@" not in value:
            return value
        match = User.objects.filter(email__iexact=value).values_list("username", flat=True).first()
        return match or value


class ProfileForm(forms.ModelForm):
    class Meta:
        model = Profile
        fields = ["full_name", "phone", "city", "avatar"]
        widgets = {
            "phone": forms.TextInput(attrs={"inputmode": "tel", "autocomplete": "tel"}),
            "avatar": forms.FileInput(attrs={"accept": "image/*"}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        style_fields(self, {"full_name": "Full name", "phone": "Phone", "city": "City"})


class AdminRoleUpdateForm(forms.Form):
    role = forms.ChoiceField(choices=User.Roles.choices)
    reason = forms.CharField(
        max_length=255,
        required=False,
        widget=forms.Textarea(attrs={"rows": 2}),
        help_text="Stored in the role change log.",
    )

    def __init__(self, *, target_user, acting_user, **kwargs):
        super().__init__(**kwargs)
        self.target_user = target_user
        self.acting_user = acting_user
        if target_user.is_superuser:
            # superusers are pinned to admin by a check constraint
            self.fields["role"].choices = [(User.Roles.ADMIN, User.Roles.ADMIN.label)]
        style_fields(self, {"reason": "Reason (optional)"})

    def clean(self):
        cleaned = super().clean()
        if not is_admin_like(self.acting_user):
            raise forms.ValidationError("Only admins can change roles.")
        if self.target_user.pk == self.acting_user.pk:
            raise forms.ValidationError("You cannot change your own role.")
        if self.target_user.is_superuser and cleaned.get("role") != User.Roles.ADMIN:
            raise forms.ValidationError("A superuser must keep the Admin role.")
        return cleaned
