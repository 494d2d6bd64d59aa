from django.db import models

from common.uploads import unique_upload_path

DEFAULT_PAYMENT_INSTRUCTIONS = 'Please scan the QR code and upload your proof of payment.'


def payment_qr_upload_to(instance, filename):
    return unique_upload_path('payment', 'QR', filename)


class SystemSettings(models.Model):
    """
    Dormitory-wide settings (singleton pattern - only one instance)
    """
    payment_qr_code = models.FileField(upload_to=payment_qr_upload_to, blank=True, default='')
    gcash_name = models.CharField(max_length=120, blank=True, default='')
    gcash_number = models.CharField(max_length=20, blank=True, default='')
    payment_instructions = models.TextField(blank=True, default=DEFAULT_PAYMENT_INSTRUCTIONS)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "System Settings"
        verbose_name_plural = "System Settings"

    def __str__(self):
        return "System Settings"

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        # Singleton rows are never removed
        pass

    @classmethod
    def load(cls):
        """Get or create the singleton instance"""
        obj, _ = cls.objects.get_or_create(pk=1)
        return obj
