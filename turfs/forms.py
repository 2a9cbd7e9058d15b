from __future__ import annotations

from django import forms
from django.conf import settings

from accounts.forms import style_fields
from .models import AMENITY_CHOICES, Turf, TurfImage, TurfSlot


class MultipleFileInput(forms.ClearableFileInput):
    allow_multiple_selected = True


class MultipleImageField(forms.ImageField):
    """ImageField that accepts several uploads under one input name."""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("widget", MultipleFileInput(attrs={"accept": "image/*"}))
        super().__init__(*args, **kwargs)

    def clean(self, data, initial=None):
        single_clean = super().clean
        if isinstance(data, (list, tuple)):
            return [single_clean(d, initial) for d in data if d]
        if not data:
            return []
        return [single_clean(data, initial)]


class TurfForm(forms.ModelForm):
    amenities = forms.MultipleChoiceField(
        choices=[(a, a) for a in AMENITY_CHOICES],
        required=False,
        widget=forms.CheckboxSelectMultiple,
    )
    photos = MultipleImageField(
        required=False,
        help_text=f"Up to {settings.TURF_MAX_IMAGES} photos per turf.",
    )

    class Meta:
        model = Turf
        fields = ["name", "description", "city", "area", "address", "sport_type", "amenities", "hourly_price"]
        widgets = {
            "description": forms.Textarea(attrs={"rows": 3}),
            "hourly_price": forms.NumberInput(attrs={"min": "0", "step": "0.01"}),
        }
        labels = {"hourly_price": "Hourly price (₹)"}

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.instance and self.instance.pk:
            self.initial.setdefault("amenities", list(self.instance.amenities or []))
        style_fields(self)

    def existing_image_count(self) -> int:
        if self.instance and self.instance.pk:
            return self.instance.images.count()
        return 0

    def clean_photos(self):
        photos = self.cleaned_data.get("photos") or []
        limit = settings.TURF_MAX_IMAGES
        if self.existing_image_count() + len(photos) > limit:
            raise forms.ValidationError(f"Max {limit} photos allowed.")
        return photos

    def clean_amenities(self):
        # keep the canonical order regardless of how the browser posted them
        picked = set(self.cleaned_data.get("amenities") or [])
        return [a for a in AMENITY_CHOICES if a in picked]

    def save_photos(self, turf: Turf) -> list:
        photos = self.cleaned_data.get("photos") or []
        start = turf.images.count()
        created = []
        for offset, upload in enumerate(photos):
            created.append(TurfImage.objects.create(turf=turf, image=upload, display_order=start + offset))
        return created


class TurfSlotForm(forms.ModelForm):
    class Meta:
        model = TurfSlot
        fields = ["day_of_week", "start_time", "end_time", "price_override"]
        widgets = {
            "start_time": forms.TimeInput(attrs={"type": "time"}, format="%H:%M"),
            "end_time": forms.TimeInput(attrs={"type": "time"}, format="%H:%M"),
            "price_override": forms.NumberInput(attrs={"min": "0", "step": "0.01", "placeholder": "Uses hourly price"}),
        }
        labels = {"day_of_week": "Day", "price_override": "Price override (₹)"}

    def __init__(self, *args, **kwargs):
        self.turf = kwargs.pop("turf")
        super().__init__(*args, **kwargs)
        self.fields["day_of_week"].initial = 1
        style_fields(self)

    def clean(self):
        cleaned = super().clean()
        day = cleaned.get("day_of_week")
        start = cleaned.get("start_time")
        end = cleaned.get("end_time")

        if start and end and end <= start:
            raise forms.ValidationError("End time must be after start time.")

        if day is not None and start:
            clash = TurfSlot.objects.filter(turf=self.turf, day_of_week=day, start_time=start)
            if self.instance.pk:
                clash = clash.exclude(pk=self.instance.pk)
            if clash.exists():
                raise forms.ValidationError("A slot already starts at that time on this day.")
        return cleaned

    def save(self, commit=True):
        slot = super().save(commit=False)
        slot.turf = self.turf
        if commit:
            slot.save()
        return slot


class TurfSearchForm(forms.Form):
    q = forms.CharField(required=False, widget=forms.TextInput(attrs={"placeholder": "Search by name or area"}))
    sport = forms.ChoiceField(required=False)
    city = forms.ChoiceField(required=False)

    def __init__(self, *args, cities=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["sport"].choices = [("", "All sports")] + list(Turf.Sport.choices)
        self.fields["city"].choices = [("", "All cities")] + [(c, c) for c in cities]
        style_fields(self)
